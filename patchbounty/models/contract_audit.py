"""
patchbounty - Contract audit model
"""
from datetime import datetime
from sqlalchemy import String, Integer, DateTime, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from patchbounty.db.database import Base
from patchbounty.core.contract_audit import ContractAuditReport


class ContractAuditRecord(Base):
    """Paid contract audit (treasury revenue)."""
    __tablename__ = "contract_audits"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    client: Mapped[str] = mapped_column(String(200))
    contract_name: Mapped[str] = mapped_column(String(300))
    lines_of_code: Mapped[int] = mapped_column(Integer, default=0)
    amount_charged: Mapped[str] = mapped_column(String(20))
    verdict: Mapped[str] = mapped_column(String(20))  # SECURE/ISSUES_FOUND/CRITICAL
    severity: Mapped[str] = mapped_column(String(10))  # low/medium/high
    summary: Mapped[str] = mapped_column(Text, default="")
    findings: Mapped[list] = mapped_column(JSON, default=list)
    tier: Mapped[str] = mapped_column(String(50), default="heuristic")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    @classmethod
    def from_report(cls, report: ContractAuditReport) -> "ContractAuditRecord":
        return cls(
            id=report.id,
            client=report.client,
            contract_name=report.contract_name,
            lines_of_code=report.lines_of_code,
            amount_charged=str(report.amount_charged),
            verdict=report.verdict.value,
            severity=report.severity.value,
            summary=report.summary,
            findings=list(report.findings),
            tier=report.tier,
            created_at=datetime.utcfromtimestamp(report.timestamp),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client": self.client,
            "contract_name": self.contract_name,
            "lines_of_code": self.lines_of_code,
            "amount_charged": self.amount_charged,
            "verdict": self.verdict,
            "severity": self.severity,
            "summary": self.summary,
            "findings": self.findings or [],
            "tier": self.tier,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
