"""Source sync: fetch, convert and store."""
from hotbrew.sync.convert import convert_item, convert_section, priority_to_score
from hotbrew.sync.sync import SyncResult, print_results, sync_all, sync_source

__all__ = [
    "SyncResult",
    "convert_item",
    "convert_section",
    "print_results",
    "priority_to_score",
    "sync_all",
    "sync_source",
]
