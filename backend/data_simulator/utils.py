# utility functions for meter reading simulation

import math
import random
from datetime import date

from .constants import OFFICE_HOURS, POWER_FACTOR, WEEKEND_LOAD_FACTOR


def load_factor(day: date, hour: int) -> float:
    """
    Share of the floor's peak load in use at a given hour (0-1).
    Office hours follow a half-sine centred on midday; outside them the
    floor sits at base load. Weekends are scaled down.
    """
    start, end = OFFICE_HOURS
    if start <= hour < end:
        factor = math.sin(math.pi * (hour - start + 0.5) / (end - start))
    else:
        factor = 0.0
    if day.isoweekday() >= 6:
        factor *= WEEKEND_LOAD_FACTOR
    return max(0.0, factor)


def sample_current(base_a: float, peak_a: float, factor: float, rng=random) -> float:
    current = base_a + (peak_a - base_a) * factor
    return max(0.0, current * rng.gauss(1, 0.05))


def real_power(voltage_v: float, current_a: float) -> float:
    return voltage_v * current_a * POWER_FACTOR


def energy_wh(power_w: float, interval_seconds: int) -> float:
    """Energy consumed over one sampling interval, assuming constant power."""
    return power_w * interval_seconds / 3600
