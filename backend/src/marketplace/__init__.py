"""
Wizard marketplace core: capability-matched job assignment and worker discovery.
"""
from .capability import validate_assignment
from .discovery import DiscoveryEngine
from .jobs import JobStore
from .workers import WorkerDirectory

__all__ = ['DiscoveryEngine', 'JobStore', 'WorkerDirectory', 'validate_assignment']
