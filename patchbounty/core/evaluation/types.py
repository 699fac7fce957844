"""Shared data structures for evaluation and settlement."""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional, Tuple, Union

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

MAX_HIGHLIGHTS = 4
MAX_CONCERNS = 3


def to_money(value: Union[Decimal, float, int, str]) -> Decimal:
    """Quantize a value to cents (half-up, like toFixed(2))."""
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


class Verdict(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"


class PricingTier(str, Enum):
    MICRO = "micro"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    CRITICAL = "critical"


class PayoutStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"
    QUEUED = "queued"


@dataclass(frozen=True)
class Submission:
    """A proposed code change plus the metadata needed to evaluate and pay it."""
    title: str
    author: str
    repo: str
    files_changed: int
    additions: int
    deletions: int
    diff: str
    payout_address: str

    def __post_init__(self):
        missing = [
            name for name in ("title", "author", "repo", "payout_address")
            if not isinstance(getattr(self, name), str) or not getattr(self, name).strip()
        ]
        if missing:
            raise ValueError(f"Submission missing required fields: {', '.join(missing)}")
        if not isinstance(self.diff, str):
            raise ValueError("Submission diff must be text")
        for name in ("files_changed", "additions", "deletions"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Submission {name} must be a non-negative integer")

    @property
    def line_count(self) -> int:
        return self.additions + self.deletions


@dataclass(frozen=True)
class SubScores:
    """Four rubric sub-scores, each clamped into [0, 25]."""
    quality: int
    security: int
    impact: int
    practice: int

    @property
    def total(self) -> int:
        return self.quality + self.security + self.impact + self.practice


@dataclass(frozen=True)
class EvaluationResult:
    """Canonical result produced by whichever evaluator tier succeeded."""
    verdict: Verdict
    score: int
    reasoning: str
    highlights: Tuple[str, ...] = ()
    concerns: Tuple[str, ...] = ()
    requires_elevated_audit: bool = False
    suggested_payout: Decimal = ZERO
    tier: str = ""
    sub_scores: Optional[SubScores] = None
    pricing_tier: Optional[PricingTier] = None

    @property
    def passed(self) -> bool:
        return self.verdict == Verdict.PASS


@dataclass(frozen=True)
class AuditEngagement:
    """Fixed-cost subcontractor review attached to a payout."""
    triggered: bool
    cost: Decimal
    subcontractor_id: str
    transaction_id: Optional[str] = None


@dataclass
class PayoutRecord:
    """Payout for one submission.

    Only ``status`` and ``transaction_id`` change after creation, and only
    once, from ``pending`` to a terminal state (see ``finalize``).
    """
    amount: Decimal
    to_address: str
    token: str = "USDC"
    status: PayoutStatus = PayoutStatus.PENDING
    transaction_id: Optional[str] = None
    audit: Optional[AuditEngagement] = None

    def finalize(self, status: PayoutStatus, transaction_id: Optional[str] = None) -> None:
        if self.status != PayoutStatus.PENDING:
            raise RuntimeError(f"Payout already finalized as {self.status.value}")
        if status == PayoutStatus.PENDING:
            raise ValueError("Payout must move to a terminal status")
        self.status = status
        self.transaction_id = transaction_id


@dataclass(frozen=True)
class SettlementResult:
    """Persisted outcome of one submission: evaluation + payout."""
    id: str
    timestamp: float
    submission: Submission
    evaluation: EvaluationResult
    payout: PayoutRecord
    source: str = "api"
    tier_failures: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        ev = self.evaluation
        sub = self.submission
        audit = self.payout.audit
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "source": self.source,
            "submission": {
                "title": sub.title,
                "author": sub.author,
                "repo": sub.repo,
                "files_changed": sub.files_changed,
                "additions": sub.additions,
                "deletions": sub.deletions,
            },
            "evaluation": {
                "verdict": ev.verdict.value,
                "score": ev.score,
                "reasoning": ev.reasoning,
                "highlights": list(ev.highlights),
                "concerns": list(ev.concerns),
                "requires_elevated_audit": ev.requires_elevated_audit,
                "tier": ev.tier,
                "pricing_tier": ev.pricing_tier.value if ev.pricing_tier else None,
                "sub_scores": (
                    {
                        "quality": ev.sub_scores.quality,
                        "security": ev.sub_scores.security,
                        "impact": ev.sub_scores.impact,
                        "practice": ev.sub_scores.practice,
                    }
                    if ev.sub_scores else None
                ),
            },
            "payout": {
                "amount": str(self.payout.amount),
                "token": self.payout.token,
                "to_address": self.payout.to_address,
                "transaction_id": self.payout.transaction_id,
                "status": self.payout.status.value,
            },
            "audit": (
                {
                    "triggered": audit.triggered,
                    "cost": str(audit.cost),
                    "subcontractor_id": audit.subcontractor_id,
                    "transaction_id": audit.transaction_id,
                }
                if audit else None
            ),
            "tier_failures": list(self.tier_failures),
        }
