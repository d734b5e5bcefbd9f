"""Snapshot - Working sets fetched once at the start of a run."""

from ticketsync.snapshot.loader import SnapshotLoader, open_tickets_jql, quote_jql
from ticketsync.snapshot.models import Snapshot

__all__ = [
    "Snapshot",
    "SnapshotLoader",
    "open_tickets_jql",
    "quote_jql",
]
