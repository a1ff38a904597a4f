"""Loading document snapshots and mapping them to ``fleet_admin`` models."""

from .adapters.fuel_log_documents import to_log_record, to_log_records
from .utils import Snapshot, SnapshotError, load_snapshot, parse_snapshot

__all__ = [
    "Snapshot",
    "SnapshotError",
    "load_snapshot",
    "parse_snapshot",
    "to_log_record",
    "to_log_records",
]
