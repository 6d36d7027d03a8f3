"""
A service that watches SIM contest rankings for newly solved problems
and announces them on Discord.
"""

from . import config
from .monitor import SolveMonitor
from .notifier import NotificationService
from .ranking import RankingClient
from .state_manager import StateManager
