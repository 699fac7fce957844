"""Tiered evaluator pipeline.

    Tier1Remote -> Tier2Remote -> ... -> Local heuristic -> Done

Each remote tier is attempted exactly once. Any ``TierFailure`` (service
error, timeout, malformed or invalid response) advances to the next tier.
The local tier cannot fail, so ``evaluate`` always returns a result.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from .evaluators import Evaluator, HeuristicEvaluator
from .normalizer import TierFailure
from .risk import requires_elevated_audit
from .signals import detect_credentials
from .types import MAX_CONCERNS, ZERO, EvaluationResult, Submission, Verdict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineOutcome:
    result: EvaluationResult
    failures: Tuple[str, ...] = ()

    @property
    def tier(self) -> str:
        return self.result.tier


def apply_credential_override(submission: Submission, result: EvaluationResult) -> EvaluationResult:
    """Force FAIL with a zero payout when the diff carries a credential literal.

    Applied to every tier's result so a remote PASS cannot bypass the rule.
    """
    hits = detect_credentials(submission.diff)
    if not hits or result.verdict == Verdict.FAIL:
        return result
    concern = f"CRITICAL: hardcoded credential in source ({hits[0]})"
    concerns = (concern,) + tuple(c for c in result.concerns if c != concern)
    return replace(
        result,
        verdict=Verdict.FAIL,
        suggested_payout=ZERO,
        pricing_tier=None,
        concerns=concerns[:MAX_CONCERNS],
        reasoning=f"SECURITY VIOLATION: hardcoded credential overrides the {result.tier} verdict. {result.reasoning}",
    )


def apply_risk_escalation(submission: Submission, result: EvaluationResult) -> EvaluationResult:
    """Require the elevated audit whenever the local classifier flags the change.

    A tier can add an audit requirement but cannot waive one.
    """
    if result.requires_elevated_audit or not requires_elevated_audit(submission.title, submission.diff):
        return result
    logger.info(f"Sensitive surface in '{submission.title}'; {result.tier} audit flag overridden")
    return replace(result, requires_elevated_audit=True)


class EvaluatorPipeline:
    """Ordered remote tiers with an unconditional local fallback."""

    def __init__(self, tiers: Sequence[Evaluator], fallback: Optional[HeuristicEvaluator] = None):
        self.tiers: List[Evaluator] = list(tiers)
        self.fallback = fallback or HeuristicEvaluator()

    @property
    def tier_names(self) -> List[str]:
        return [t.name for t in self.tiers] + [self.fallback.name]

    async def evaluate(self, submission: Submission) -> PipelineOutcome:
        failures: List[str] = []
        for tier in self.tiers:
            logger.info(f"Evaluating '{submission.title}' with tier {tier.name}")
            try:
                result = await tier.attempt(submission)
            except TierFailure as e:
                logger.warning(f"Tier {e.tier} failed: {e.reason}")
                failures.append(str(e))
                continue
            return PipelineOutcome(self._finalize(submission, result), tuple(failures))

        logger.info(f"Evaluating '{submission.title}' with local {self.fallback.name} tier")
        result = self.fallback.evaluate(submission)
        return PipelineOutcome(self._finalize(submission, result), tuple(failures))

    @staticmethod
    def _finalize(submission: Submission, result: EvaluationResult) -> EvaluationResult:
        return apply_credential_override(submission, apply_risk_escalation(submission, result))
