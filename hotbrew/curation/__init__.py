"""Curation pipeline: rules, dedup, scoring and diversity."""
from hotbrew.curation.dedup import dedup, normalize_title
from hotbrew.curation.diversity import DiversityLimits, enforce_diversity, extract_domain
from hotbrew.curation.engine import Engine, build_sections
from hotbrew.curation.rules import apply_rules, count_applied_rules
from hotbrew.curation.scoring import engagement_score, recency_score, score_items

__all__ = [
    "DiversityLimits",
    "Engine",
    "apply_rules",
    "build_sections",
    "count_applied_rules",
    "dedup",
    "engagement_score",
    "enforce_diversity",
    "extract_domain",
    "normalize_title",
    "recency_score",
    "score_items",
]
