"""
patchbounty - Submission evaluation

Signal extraction, scoring rubric, pricing, risk classification and the
tiered evaluator pipeline.
"""

from patchbounty.core.evaluation.evaluators import (
    HEURISTIC_TIER,
    Evaluator,
    HeuristicEvaluator,
    RemoteEvaluator,
)
from patchbounty.core.evaluation.normalizer import (
    ResponseValidationError,
    TierFailure,
    normalize_remote_response,
)
from patchbounty.core.evaluation.pipeline import EvaluatorPipeline, PipelineOutcome
from patchbounty.core.evaluation.pricing import TIER_RANGES, PriceQuote, price_submission
from patchbounty.core.evaluation.risk import requires_elevated_audit, risk_reasons
from patchbounty.core.evaluation.rubric import PASS_THRESHOLD, evaluate_rubric
from patchbounty.core.evaluation.signals import DiffSignals, PatternSignalExtractor, SignalExtractor
from patchbounty.core.evaluation.types import (
    AuditEngagement,
    EvaluationResult,
    PayoutRecord,
    PayoutStatus,
    PricingTier,
    SettlementResult,
    Submission,
    SubScores,
    Verdict,
)

__all__ = [
    "HEURISTIC_TIER",
    "Evaluator",
    "HeuristicEvaluator",
    "RemoteEvaluator",
    "ResponseValidationError",
    "TierFailure",
    "normalize_remote_response",
    "EvaluatorPipeline",
    "PipelineOutcome",
    "TIER_RANGES",
    "PriceQuote",
    "price_submission",
    "requires_elevated_audit",
    "risk_reasons",
    "PASS_THRESHOLD",
    "evaluate_rubric",
    "DiffSignals",
    "PatternSignalExtractor",
    "SignalExtractor",
    "AuditEngagement",
    "EvaluationResult",
    "PayoutRecord",
    "PayoutStatus",
    "PricingTier",
    "SettlementResult",
    "Submission",
    "SubScores",
    "Verdict",
]
