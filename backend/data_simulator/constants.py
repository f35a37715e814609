# Constants for simulating building electrical-meter readings

# Per-floor load profile: current drawn at night vs. at the busiest office hour (A)
FLOOR_PROFILES = {
    1: {'label': 'Lobby & retail', 'base_current_a': 2.0, 'peak_current_a': 8.5},
    2: {'label': 'Open office', 'base_current_a': 1.5, 'peak_current_a': 9.5},
    3: {'label': 'Server room', 'base_current_a': 6.0, 'peak_current_a': 7.5},
    4: {'label': 'Meeting rooms', 'base_current_a': 0.8, 'peak_current_a': 6.0},
}

NOMINAL_VOLTAGE_V = 230.0
VOLTAGE_SPREAD_V = 8.0  # ± around nominal
POWER_FACTOR = 0.92

OFFICE_HOURS = (8, 18)  # [start, end) local time
WEEKEND_LOAD_FACTOR = 0.35

DEFAULT_SAMPLE_INTERVAL_SECONDS = 60
