"""Strict shape-and-range validation of remote evaluator responses.

A remote tier's JSON is admitted into ``EvaluationResult`` only if every
field has the expected type. Score and payout are the two fields that are
clamped rather than rejected when out of range.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Tuple

from .types import MAX_CONCERNS, MAX_HIGHLIGHTS, ZERO, EvaluationResult, Verdict, to_money


class TierFailure(Exception):
    """An evaluator tier could not produce a usable result."""

    def __init__(self, tier: str, reason: str):
        super().__init__(f"{tier}: {reason}")
        self.tier = tier
        self.reason = reason


class ResponseValidationError(TierFailure):
    """A remote response failed shape or range validation."""
    pass


REQUIRED_FIELDS = (
    "verdict",
    "score",
    "reasoning",
    "highlights",
    "concerns",
    "suggestedPayout",
    "requiresSecurityAudit",
)


def _finite_number(tier: str, field: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ResponseValidationError(tier, f"'{field}' must be numeric, got boolean")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().lstrip("$"))
        except ValueError:
            raise ResponseValidationError(tier, f"'{field}' is not numeric: {value!r}")
    else:
        raise ResponseValidationError(tier, f"'{field}' must be numeric, got {type(value).__name__}")
    if not math.isfinite(number):
        raise ResponseValidationError(tier, f"'{field}' is not finite")
    return number


def _string_list(tier: str, field: str, value: Any, cap: int) -> Tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ResponseValidationError(tier, f"'{field}' must be a list of strings")
    return tuple(value[:cap])


def normalize_remote_response(tier: str, data: Dict[str, Any], payout_ceiling: Decimal) -> EvaluationResult:
    """Validate a parsed remote response and convert it to the canonical shape.

    Raises:
        ResponseValidationError: on any missing field, wrong type, or
            non-numeric score/payout.
    """
    if not isinstance(data, dict):
        raise ResponseValidationError(tier, "response is not a JSON object")

    missing: List[str] = [f for f in REQUIRED_FIELDS if f not in data]
    if missing:
        raise ResponseValidationError(tier, f"missing fields: {', '.join(missing)}")

    raw_verdict = data["verdict"]
    if raw_verdict not in (Verdict.PASS.value, Verdict.FAIL.value):
        raise ResponseValidationError(tier, f"invalid verdict: {raw_verdict!r}")
    verdict = Verdict(raw_verdict)

    clamped = max(0.0, min(100.0, _finite_number(tier, "score", data["score"])))
    score = int(Decimal(repr(clamped)).quantize(Decimal(1), rounding=ROUND_HALF_UP))

    reasoning = data["reasoning"]
    if not isinstance(reasoning, str) or not reasoning.strip():
        raise ResponseValidationError(tier, "'reasoning' must be a non-empty string")

    highlights = _string_list(tier, "highlights", data["highlights"], MAX_HIGHLIGHTS)
    concerns = _string_list(tier, "concerns", data["concerns"], MAX_CONCERNS)

    payout_value = _finite_number(tier, "suggestedPayout", data["suggestedPayout"])
    payout = to_money(max(0.0, min(float(payout_ceiling), payout_value)))
    payout = min(payout_ceiling, payout)
    if verdict == Verdict.FAIL:
        payout = ZERO

    audit_flag = data["requiresSecurityAudit"]
    if not isinstance(audit_flag, bool):
        raise ResponseValidationError(tier, "'requiresSecurityAudit' must be a boolean")

    narrative = f"[{tier}] {reasoning.strip()}"
    rationale = data.get("pricingRationale")
    if rationale is not None:
        if not isinstance(rationale, str):
            raise ResponseValidationError(tier, "'pricingRationale' must be a string")
        if rationale.strip():
            narrative += f" Pricing: {rationale.strip()}"

    return EvaluationResult(
        verdict=verdict,
        score=score,
        reasoning=narrative,
        highlights=highlights,
        concerns=concerns,
        requires_elevated_audit=audit_flag,
        suggested_payout=payout,
        tier=tier,
    )
