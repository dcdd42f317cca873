"""Local SQLite persistence."""
from hotbrew.store.models import ITEM_STATES, RULE_KINDS, ItemFilter, Rule, SourceRecord
from hotbrew.store.store import Store

__all__ = ["ITEM_STATES", "RULE_KINDS", "ItemFilter", "Rule", "SourceRecord", "Store"]
