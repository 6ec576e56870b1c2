"""
Sync Package.

Local-first synchronization engine:
    ConnectivityMonitor - best-effort online/offline signal
    DebounceScheduler   - coalesces bursts of edits into one save
    SyncReconciler      - create/update/delete propagation and synced flags
"""

from notesync.sync.connectivity import ConnectivityMonitor
from notesync.sync.debounce import DebounceScheduler
from notesync.sync.reconciler import SyncReconciler

__all__ = [
    "ConnectivityMonitor",
    "DebounceScheduler",
    "SyncReconciler",
]
