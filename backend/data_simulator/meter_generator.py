# meter_generator.py
import random
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional

from .constants import (
    DEFAULT_SAMPLE_INTERVAL_SECONDS,
    FLOOR_PROFILES,
    NOMINAL_VOLTAGE_V,
    VOLTAGE_SPREAD_V,
)
from .utils import energy_wh, load_factor, real_power, sample_current


class MeterDataSimulator:
    """
    Synthetic per-floor meter readings with an office-hours load curve,
    voltage noise around nominal and energy derived from power.
    """
    def __init__(self, seed: Optional[int] = None):
        self.floors = FLOOR_PROFILES
        self.rng = random.Random(seed)

    def generate_day(
        self,
        floor: int,
        day: date,
        interval_seconds: int = DEFAULT_SAMPLE_INTERVAL_SECONDS
    ) -> List[Dict]:
        if floor not in self.floors:
            raise ValueError(f"Floor {floor} not supported")
        if interval_seconds <= 0 or 86400 % interval_seconds:
            raise ValueError("interval_seconds must evenly divide a day")
        profile = self.floors[floor]
        readings = []
        start = datetime.combine(day, time())
        for step in range(86400 // interval_seconds):
            ts = start + timedelta(seconds=step * interval_seconds)
            voltage = NOMINAL_VOLTAGE_V + self.rng.uniform(-VOLTAGE_SPREAD_V, VOLTAGE_SPREAD_V)
            current = sample_current(
                profile['base_current_a'],
                profile['peak_current_a'],
                load_factor(day, ts.hour),
                self.rng
            )
            power = real_power(voltage, current)
            readings.append({
                'date': day,
                'hour': ts.hour,
                'minute': ts.minute,
                'second': ts.second,
                'timestamp': ts,
                'floor': floor,
                'voltage': round(voltage, 2),
                'current': round(current, 3),
                'power': round(power, 2),
                'energy': round(energy_wh(power, interval_seconds), 4),
            })
        return readings

    def generate_date_range(
        self,
        start_date: date,
        days: int = 7,
        floors: Optional[Iterable[int]] = None,
        interval_seconds: int = DEFAULT_SAMPLE_INTERVAL_SECONDS
    ) -> List[Dict]:
        """
        Generate readings for multiple days and floors.

        Returns a flattened list ordered by day, then floor, then time.
        """
        floors = list(floors) if floors is not None else sorted(self.floors)
        all_data = []
        for offset in range(days):
            current_date = start_date + timedelta(days=offset)
            for floor in floors:
                all_data.extend(self.generate_day(floor, current_date, interval_seconds))
        return all_data
