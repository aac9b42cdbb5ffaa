"""Outbound/inbound synchronization with the remote store."""

from fintrack.sync.controller import SyncController
from fintrack.sync.debounce import Debouncer
from fintrack.sync.report import KindSyncReport, SyncReport

__all__ = [
    "Debouncer",
    "KindSyncReport",
    "SyncController",
    "SyncReport",
]
