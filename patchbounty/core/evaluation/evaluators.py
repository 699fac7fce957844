"""Evaluator tiers.

Every tier exposes ``attempt(submission)``, which either returns a canonical
``EvaluationResult`` or raises ``TierFailure``. Remote tiers wrap an LLM
provider; the heuristic tier composes the rubric, pricing and risk
classifier and never fails.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from patchbounty.core.llm import GenerateOptions, LLMProvider, extract_json

from .normalizer import TierFailure, normalize_remote_response
from .pricing import price_submission
from .prompts import EVALUATION_SYSTEM_PROMPT, build_evaluation_prompt
from .risk import requires_elevated_audit
from .rubric import evaluate_rubric
from .signals import PatternSignalExtractor, SignalExtractor
from .types import EvaluationResult, Submission, Verdict

logger = logging.getLogger(__name__)

HEURISTIC_TIER = "heuristic"


class Evaluator(ABC):
    """One backend in the fallback chain."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def attempt(self, submission: Submission) -> EvaluationResult:
        """Evaluate ``submission`` or raise ``TierFailure``."""
        ...


class RemoteEvaluator(Evaluator):
    """LLM-backed tier with a hard timeout and strict response validation."""

    def __init__(
        self,
        provider: LLMProvider,
        model: str,
        payout_ceiling: Decimal,
        timeout_seconds: float = 30.0,
        max_tokens: int = 1024,
    ):
        self.provider = provider
        self.model = model
        self.payout_ceiling = payout_ceiling
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens

    @property
    def name(self) -> str:
        return self.provider.name

    async def attempt(self, submission: Submission) -> EvaluationResult:
        if not await self.provider.is_available():
            raise TierFailure(self.name, "provider not configured")

        messages = [{"role": "user", "content": build_evaluation_prompt(submission)}]
        options = GenerateOptions(model=self.model, temperature=0.0, max_tokens=self.max_tokens)
        try:
            response = await asyncio.wait_for(
                self.provider.generate(messages, EVALUATION_SYSTEM_PROMPT, options),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise TierFailure(self.name, f"timed out after {self.timeout_seconds:g}s")
        except Exception as e:
            raise TierFailure(self.name, f"service error: {e}")

        logger.debug(f"{self.name} responded ({response.total_tokens} tokens, model={response.model})")
        data = extract_json(response.text)
        if data is None:
            raise TierFailure(self.name, "no JSON object in response")
        return normalize_remote_response(self.name, data, self.payout_ceiling)


class HeuristicEvaluator(Evaluator):
    """Local deterministic tier: rubric + pricing + risk classifier."""

    def __init__(self, extractor: Optional[SignalExtractor] = None):
        self.extractor = extractor or PatternSignalExtractor()

    @property
    def name(self) -> str:
        return HEURISTIC_TIER

    def evaluate(self, submission: Submission) -> EvaluationResult:
        signals = self.extractor.extract(submission)
        outcome = evaluate_rubric(signals)
        quote = price_submission(outcome.verdict, outcome.total, signals, submission.additions)

        reasoning = outcome.summary
        if quote.rationale:
            reasoning = f"{reasoning} Pricing: {quote.rationale}"

        return EvaluationResult(
            verdict=outcome.verdict,
            score=outcome.total,
            reasoning=reasoning,
            highlights=outcome.highlights,
            concerns=outcome.concerns,
            requires_elevated_audit=requires_elevated_audit(submission.title, submission.diff),
            suggested_payout=quote.amount,
            tier=self.name,
            sub_scores=outcome.sub_scores,
            pricing_tier=quote.tier if outcome.verdict == Verdict.PASS else None,
        )

    async def attempt(self, submission: Submission) -> EvaluationResult:
        return self.evaluate(submission)
