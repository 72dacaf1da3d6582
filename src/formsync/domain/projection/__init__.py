"""Projection of persisted repeater children into flat form field-sets."""

from __future__ import annotations

from .engine import RepeaterProjector, project
from .fieldset import (
    FieldKey,
    FormFields,
    ProjectedFieldSet,
    ProjectedItem,
    RepeaterEntry,
    RepeaterProjection,
)

__all__ = [
    "FieldKey",
    "FormFields",
    "ProjectedFieldSet",
    "ProjectedItem",
    "RepeaterEntry",
    "RepeaterProjection",
    "RepeaterProjector",
    "project",
]
