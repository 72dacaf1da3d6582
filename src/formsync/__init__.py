"""Reconcile nested repeater form submissions against persisted child records."""

from __future__ import annotations

__version__ = "0.1.0"
