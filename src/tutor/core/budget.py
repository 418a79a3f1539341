"""Token budget tiers for session context size."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_TOKEN_LIMIT = 1_000_000
TOKEN_COUNT_FAILED = -1
ADVISORY_PERCENT = 50.0
URGENT_PERCENT = 80.0


class BudgetTier(str, Enum):
    SILENT = "silent"
    ADVISORY = "advisory"
    URGENT = "urgent"


@dataclass(frozen=True)
class BudgetReport:
    """Token usage of one session against the context ceiling."""

    tokens: int
    limit: int
    percent: float
    tier: BudgetTier


def tier_for(percent: float) -> BudgetTier:
    if percent >= URGENT_PERCENT:
        return BudgetTier.URGENT
    if percent >= ADVISORY_PERCENT:
        return BudgetTier.ADVISORY
    return BudgetTier.SILENT


def assess(tokens: int, limit: int = DEFAULT_TOKEN_LIMIT) -> BudgetReport | None:
    """Map a token count to a tier; a failed count yields no report.

    Negative counts are the failure sentinel of the token-count call and mean
    "skip the check", never "nothing used".
    """
    if tokens < 0:
        return None
    if limit <= 0:
        raise ValueError("token limit must be positive")
    percent = tokens / limit * 100.0
    return BudgetReport(tokens=tokens, limit=limit, percent=percent, tier=tier_for(percent))
