"""Runner - One batch pass over a freshly loaded snapshot."""

from ticketsync.runner.models import RunReport
from ticketsync.runner.runner import SyncRunner

__all__ = [
    "RunReport",
    "SyncRunner",
]
