from .meter_generator import MeterDataSimulator

__all__ = ['MeterDataSimulator']
