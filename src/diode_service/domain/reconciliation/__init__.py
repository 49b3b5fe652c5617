"""Reconciliation core for pushing discovery facts into NetBox.

Layered flow for one batch:
1) normalize raw facts into NetBox-shaped entities (pure, fails closed)
2) resolve the batch into dependency-ordered stages
3) push each stage (create-or-update), caching resolved NetBox ids
4) report created/updated/skipped/failed per entity
"""

from __future__ import annotations

from .cache import ResolutionCache
from .engine import ReconciliationEngine
from .normalize import fact_identity, normalize_fact
from .plan import STAGE_KINDS, PlanStage, ReconciliationPlan
from .push import Pusher
from .report import BatchReport, EntityOutcome
from .resolve import resolve_batch

__all__ = [
    "STAGE_KINDS",
    "BatchReport",
    "EntityOutcome",
    "PlanStage",
    "Pusher",
    "ReconciliationEngine",
    "ReconciliationPlan",
    "ResolutionCache",
    "fact_identity",
    "normalize_fact",
    "resolve_batch",
]
