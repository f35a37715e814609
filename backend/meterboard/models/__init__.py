from .reading import Reading
from .summary import DailySummary, HourlySummary

__all__ = ['Reading', 'DailySummary', 'HourlySummary']
