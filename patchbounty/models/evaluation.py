"""
patchbounty - Settled evaluation model
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Integer, Boolean, DateTime, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from patchbounty.db.database import Base
from patchbounty.core.evaluation.types import SettlementResult


class EvaluationRecord(Base):
    """One row per settled submission: verdict, payout and audit engagement."""
    __tablename__ = "evaluations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    source: Mapped[str] = mapped_column(String(20), default="api")  # api/simulation

    # Submission
    title: Mapped[str] = mapped_column(String(500))
    author: Mapped[str] = mapped_column(String(200))
    repo: Mapped[str] = mapped_column(String(300))
    files_changed: Mapped[int] = mapped_column(Integer, default=0)
    additions: Mapped[int] = mapped_column(Integer, default=0)
    deletions: Mapped[int] = mapped_column(Integer, default=0)

    # Evaluation
    verdict: Mapped[str] = mapped_column(String(10))
    score: Mapped[int] = mapped_column(Integer, default=0)
    tier: Mapped[str] = mapped_column(String(50))
    pricing_tier: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    reasoning: Mapped[str] = mapped_column(Text, default="")
    highlights: Mapped[list] = mapped_column(JSON, default=list)
    concerns: Mapped[list] = mapped_column(JSON, default=list)
    tier_failures: Mapped[list] = mapped_column(JSON, default=list)
    requires_elevated_audit: Mapped[bool] = mapped_column(Boolean, default=False)

    # Payout (amounts kept as exact decimal strings)
    payout_amount: Mapped[str] = mapped_column(String(20), default="0.00")
    payout_token: Mapped[str] = mapped_column(String(20), default="USDC")
    payout_address: Mapped[str] = mapped_column(String(200))
    payout_status: Mapped[str] = mapped_column(String(20))  # sent/failed/skipped/queued
    transaction_id: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Elevated audit
    audit_triggered: Mapped[bool] = mapped_column(Boolean, default=False)
    audit_cost: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    subcontractor_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    audit_transaction_id: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    @classmethod
    def from_result(cls, result: SettlementResult) -> "EvaluationRecord":
        sub = result.submission
        ev = result.evaluation
        payout = result.payout
        audit = payout.audit
        return cls(
            id=result.id,
            source=result.source,
            title=sub.title,
            author=sub.author,
            repo=sub.repo,
            files_changed=sub.files_changed,
            additions=sub.additions,
            deletions=sub.deletions,
            verdict=ev.verdict.value,
            score=ev.score,
            tier=ev.tier,
            pricing_tier=ev.pricing_tier.value if ev.pricing_tier else None,
            reasoning=ev.reasoning,
            highlights=list(ev.highlights),
            concerns=list(ev.concerns),
            tier_failures=list(result.tier_failures),
            requires_elevated_audit=ev.requires_elevated_audit,
            payout_amount=str(payout.amount),
            payout_token=payout.token,
            payout_address=payout.to_address,
            payout_status=payout.status.value,
            transaction_id=payout.transaction_id,
            audit_triggered=bool(audit and audit.triggered),
            audit_cost=str(audit.cost) if audit else None,
            subcontractor_id=audit.subcontractor_id if audit else None,
            audit_transaction_id=audit.transaction_id if audit else None,
            created_at=datetime.utcfromtimestamp(result.timestamp),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "source": self.source,
            "title": self.title,
            "author": self.author,
            "repo": self.repo,
            "files_changed": self.files_changed,
            "additions": self.additions,
            "deletions": self.deletions,
            "verdict": self.verdict,
            "score": self.score,
            "tier": self.tier,
            "pricing_tier": self.pricing_tier,
            "reasoning": self.reasoning,
            "highlights": self.highlights or [],
            "concerns": self.concerns or [],
            "tier_failures": self.tier_failures or [],
            "requires_elevated_audit": self.requires_elevated_audit,
            "payout_amount": self.payout_amount,
            "payout_token": self.payout_token,
            "payout_address": self.payout_address,
            "payout_status": self.payout_status,
            "transaction_id": self.transaction_id,
            "audit_triggered": self.audit_triggered,
            "audit_cost": self.audit_cost,
            "subcontractor_id": self.subcontractor_id,
            "audit_transaction_id": self.audit_transaction_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
