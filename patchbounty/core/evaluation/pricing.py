"""Dynamic bounty pricing.

A tier is chosen from structural features of the change (first matching
rule wins), then the amount within the tier is scaled by the total score:

    amount = floor + (score / 100) * span        (rounded to cents)

The per-submission cap is a ledger policy and is not applied here.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, List, Tuple

from .signals import DiffSignals
from .types import ZERO, PricingTier, Verdict, to_money


@dataclass(frozen=True)
class TierRange:
    floor: Decimal
    span: Decimal

    @property
    def ceiling(self) -> Decimal:
        return self.floor + self.span


TIER_RANGES: Dict[PricingTier, TierRange] = {
    PricingTier.MICRO: TierRange(Decimal("0.50"), Decimal("1.50")),
    PricingTier.SMALL: TierRange(Decimal("2.00"), Decimal("6.00")),
    PricingTier.MEDIUM: TierRange(Decimal("8.00"), Decimal("12.00")),
    PricingTier.LARGE: TierRange(Decimal("20.00"), Decimal("15.00")),
    PricingTier.CRITICAL: TierRange(Decimal("35.00"), Decimal("15.00")),
}

# Evaluated top to bottom; the first predicate that matches selects the tier.
TIER_RULES: List[Tuple[PricingTier, Callable[[DiffSignals], bool]]] = [
    (PricingTier.CRITICAL, lambda s: s.has_security_fix and s.line_count > 20),
    (PricingTier.LARGE, lambda s: s.has_class and s.has_cleanup and s.line_count > 50),
    (PricingTier.MEDIUM, lambda s: s.has_types and s.has_error_handling and s.line_count > 30),
    (PricingTier.SMALL, lambda s: s.line_count > 10),
]


@dataclass(frozen=True)
class PriceQuote:
    amount: Decimal
    tier: PricingTier
    rationale: str


def select_tier(signals: DiffSignals) -> PricingTier:
    for tier, matches in TIER_RULES:
        if matches(signals):
            return tier
    return PricingTier.MICRO


def _rationale(tier: PricingTier, s: DiffSignals, additions: int) -> str:
    if tier == PricingTier.CRITICAL:
        return f"Critical security fix across {s.line_count} lines, priced at premium tier."
    if tier == PricingTier.LARGE:
        return f"Large infrastructure module with {additions} additions, significant architectural contribution."
    if tier == PricingTier.MEDIUM:
        return "Medium-complexity change with clean patterns, standard feature-tier pricing."
    if tier == PricingTier.SMALL:
        return f"Small contribution with {s.line_count} lines changed, utility-tier pricing."
    return "Minor fix, micro-bounty tier."


def price_submission(verdict: Verdict, total_score: int, signals: DiffSignals, additions: int = 0) -> PriceQuote:
    """Quote a payout. FAIL always quotes exactly zero."""
    tier = select_tier(signals)
    if verdict != Verdict.PASS:
        return PriceQuote(amount=ZERO, tier=tier, rationale="")
    rng = TIER_RANGES[tier]
    score = max(0, min(100, total_score))
    amount = to_money(rng.floor + (Decimal(score) / Decimal(100)) * rng.span)
    return PriceQuote(amount=amount, tier=tier, rationale=_rationale(tier, signals, additions))
