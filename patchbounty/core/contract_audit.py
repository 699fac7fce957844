"""
patchbounty - Contract audits (revenue side)

Clients pay a fixed price to have a smart-contract source reviewed. The
price is credited to the treasury through ``record_revenue``, which is what
funds the bounty side. An optional LLM provider is tried first; its
response goes through the same validate-or-fallback rule as the evaluator
tiers, and the deterministic heuristic below is the unconditional fallback.
"""

import asyncio
import logging
import re
import time
import uuid
from collections import deque
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Deque, Dict, List, Optional, Tuple

from .evaluation.normalizer import ResponseValidationError, TierFailure
from .evaluation.types import to_money
from .llm import GenerateOptions, LLMProvider, extract_json
from .treasury import TreasuryLedger

logger = logging.getLogger(__name__)

MAX_FINDINGS = 5
MAX_SOURCE_CHARS = 12000
LARGE_CONTRACT_LOC = 400


class AuditVerdict(str, Enum):
    SECURE = "SECURE"
    ISSUES_FOUND = "ISSUES_FOUND"
    CRITICAL = "CRITICAL"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


SEVERITY_VERDICTS = {
    Severity.HIGH: AuditVerdict.CRITICAL,
    Severity.MEDIUM: AuditVerdict.ISSUES_FOUND,
    Severity.LOW: AuditVerdict.SECURE,
}

AUDIT_SYSTEM_PROMPT = """You are an enterprise smart-contract security auditor. A client has paid for a review of their Solidity contract.

Focus on: reentrancy, access control, integer overflow, unchecked external calls, gas optimization and common Solidity pitfalls.

Respond with ONLY this JSON object:
{
  "verdict": "SECURE" or "ISSUES_FOUND" or "CRITICAL",
  "severity": "low" or "medium" or "high",
  "summary": "<2-3 sentence security assessment>",
  "findings": ["<finding 1>", "<finding 2>", "<finding 3>"]
}"""


@dataclass(frozen=True)
class ContractAuditRequest:
    client: str
    contract_name: str
    source: str
    price: Decimal
    lines_of_code: Optional[int] = None

    def __post_init__(self):
        for name in ("client", "contract_name", "source"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Contract audit request missing {name}")
        if self.lines_of_code is not None and (
            isinstance(self.lines_of_code, bool) or not isinstance(self.lines_of_code, int) or self.lines_of_code < 0
        ):
            raise ValueError("lines_of_code must be a non-negative integer")
        try:
            price = Decimal(str(self.price))
        except ArithmeticError:
            raise ValueError(f"Invalid audit price: {self.price!r}")
        if not price.is_finite() or to_money(price) <= 0:
            raise ValueError("Audit price must be at least one cent")

    @property
    def loc(self) -> int:
        if self.lines_of_code is not None:
            return self.lines_of_code
        return len(self.source.splitlines())


@dataclass(frozen=True)
class ContractAuditReport:
    id: str
    timestamp: float
    client: str
    contract_name: str
    lines_of_code: int
    amount_charged: Decimal
    verdict: AuditVerdict
    severity: Severity
    summary: str
    findings: Tuple[str, ...]
    tier: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "client": self.client,
            "contract_name": self.contract_name,
            "lines_of_code": self.lines_of_code,
            "amount_charged": str(self.amount_charged),
            "verdict": self.verdict.value,
            "severity": self.severity.value,
            "summary": self.summary,
            "findings": list(self.findings),
            "tier": self.tier,
        }


# Compiled once; matched against the contract source
_REENTRANCY_GUARD = re.compile(r"ReentrancyGuard|nonReentrant")
_ACCESS_CONTROL = re.compile(r"Ownable|AccessControl|onlyOwner|onlyRole")
_PAUSABLE = re.compile(r"Pausable|whenNotPaused")
_EVENTS = re.compile(r"emit\s+\w+")
_REQUIRE = re.compile(r"require\(")
_LOW_LEVEL_CALL = re.compile(r"\.call\{")
_TRANSFER = re.compile(r"\.transfer\(")


def heuristic_audit(request: ContractAuditRequest) -> Tuple[AuditVerdict, Severity, str, Tuple[str, ...]]:
    """Pattern-based review: returns (verdict, severity, summary, findings)."""
    code = request.source
    findings: List[str] = []
    severity = Severity.LOW

    if _REENTRANCY_GUARD.search(code):
        findings.append("ReentrancyGuard in place; reentrant calls are blocked")
    else:
        findings.append("No ReentrancyGuard detected; vulnerable to reentrancy")
        severity = Severity.HIGH

    if _ACCESS_CONTROL.search(code):
        scheme = "Ownable" if "Ownable" in code else "AccessControl"
        findings.append(f"Access control implemented via {scheme}")
    else:
        findings.append("No access control; every function is publicly callable")
        severity = Severity.HIGH

    if _PAUSABLE.search(code):
        findings.append("Circuit breaker (Pausable) available for emergency stops")

    if _LOW_LEVEL_CALL.search(code):
        findings.append("Low-level .call() used; ensure the return value is checked")
        if severity == Severity.LOW:
            severity = Severity.MEDIUM

    if _EVENTS.search(code):
        findings.append("Events emitted for state changes")
    if _REQUIRE.search(code):
        findings.append("Input validation via require statements")
    if _TRANSFER.search(code):
        findings.append("Uses .transfer(), limited to a 2300 gas stipend")
    if request.loc > LARGE_CONTRACT_LOC:
        findings.append(f"Contract exceeds {LARGE_CONTRACT_LOC} LOC; consider splitting into smaller modules")

    verdict = SEVERITY_VERDICTS[severity]
    name = request.contract_name
    if verdict == AuditVerdict.SECURE:
        summary = (
            f"{name} passes security review. Proven primitives provide access control, "
            f"reentrancy protection and event logging."
        )
    elif verdict == AuditVerdict.ISSUES_FOUND:
        summary = (
            f"{name} has minor issues. Core security patterns are in place but low-level "
            f"calls require careful review."
        )
    else:
        summary = (
            f"{name} has critical vulnerabilities. Missing reentrancy guards or access "
            f"controls could allow fund extraction. Do not deploy without fixes."
        )
    return verdict, severity, summary, tuple(findings[:MAX_FINDINGS])


def normalize_audit_response(tier: str, data: Any) -> Tuple[AuditVerdict, Severity, str, Tuple[str, ...]]:
    if not isinstance(data, dict):
        raise ResponseValidationError(tier, "response is not a JSON object")
    try:
        verdict = AuditVerdict(data.get("verdict"))
        severity = Severity(data.get("severity"))
    except ValueError as e:
        raise ResponseValidationError(tier, str(e))
    summary = data.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        raise ResponseValidationError(tier, "'summary' must be a non-empty string")
    findings = data.get("findings")
    if not isinstance(findings, list) or not all(isinstance(f, str) for f in findings):
        raise ResponseValidationError(tier, "'findings' must be a list of strings")
    return verdict, severity, f"[{tier}] {summary.strip()}", tuple(findings[:MAX_FINDINGS])


class ContractAuditor:
    """Runs paid contract audits and books their revenue."""

    def __init__(
        self,
        ledger: TreasuryLedger,
        provider: Optional[LLMProvider] = None,
        model: str = "",
        timeout_seconds: float = 30.0,
        max_tokens: int = 1024,
        max_records: int = 50,
    ):
        self.ledger = ledger
        self.provider = provider
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self._audits: Deque[ContractAuditReport] = deque(maxlen=max_records)

    async def _remote_audit(self, request: ContractAuditRequest) -> Tuple[AuditVerdict, Severity, str, Tuple[str, ...]]:
        provider = self.provider
        if provider is None or not await provider.is_available():
            raise TierFailure(provider.name if provider else "remote", "provider not configured")

        source = request.source
        if len(source) > MAX_SOURCE_CHARS:
            source = source[:MAX_SOURCE_CHARS] + "\n... [truncated]"
        prompt = f"Audit this Solidity smart contract for {request.client}:\n\n```solidity\n{source}\n```"
        options = GenerateOptions(model=self.model, temperature=0.0, max_tokens=self.max_tokens)
        try:
            response = await asyncio.wait_for(
                provider.generate([{"role": "user", "content": prompt}], AUDIT_SYSTEM_PROMPT, options),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise TierFailure(provider.name, f"timed out after {self.timeout_seconds:g}s")
        except Exception as e:
            raise TierFailure(provider.name, f"service error: {e}")

        return normalize_audit_response(provider.name, extract_json(response.text))

    async def audit(self, request: ContractAuditRequest) -> ContractAuditReport:
        price = to_money(request.price)
        tier = "heuristic"
        try:
            verdict, severity, summary, findings = await self._remote_audit(request)
            tier = self.provider.name
        except TierFailure as e:
            if self.provider is not None:
                logger.warning(f"Contract audit tier {e.tier} failed: {e.reason}")
            verdict, severity, summary, findings = heuristic_audit(request)

        self.ledger.record_revenue(price)
        report = ContractAuditReport(
            id=f"audit-{uuid.uuid4()}",
            timestamp=time.time(),
            client=request.client,
            contract_name=request.contract_name,
            lines_of_code=request.loc,
            amount_charged=price,
            verdict=verdict,
            severity=severity,
            summary=summary,
            findings=findings,
            tier=tier,
        )
        self._audits.appendleft(report)
        logger.info(
            f"Contract audit {report.id} for {request.client}/{request.contract_name}: "
            f"{verdict.value} ({severity.value}), charged {price}"
        )
        return report

    def list_audits(self) -> List[Dict[str, Any]]:
        return [a.to_dict() for a in self._audits]
