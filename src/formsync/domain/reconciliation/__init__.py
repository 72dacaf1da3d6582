"""Reconciliation of submitted repeater items against persisted child rows."""

from __future__ import annotations

from .engine import (
    ReconciliationContext,
    ReconciliationResult,
    RepeaterReconciler,
    existing_record_id,
    reconcile,
)
from .payload import (
    LanguageEntry,
    SubmittedRepeaterItem,
    derive_languages,
    parse_repeater_items,
)

__all__ = [
    "LanguageEntry",
    "ReconciliationContext",
    "ReconciliationResult",
    "RepeaterReconciler",
    "SubmittedRepeaterItem",
    "derive_languages",
    "existing_record_id",
    "parse_repeater_items",
    "reconcile",
]
