from .api import MeterboardAPI, MeterboardAPIError
from .cache import BoundedCache
from .cards import statistics_cards
from .store import DashboardStore

__all__ = ['MeterboardAPI', 'MeterboardAPIError', 'BoundedCache', 'DashboardStore', 'statistics_cards']
