"""
patchbounty - Settlement service

Builds the process-wide ledger, evaluator pipeline, orchestrator and
contract auditor from ``settings``. Routers obtain them through the
``get_*`` accessors; tests swap them with ``configure_services``.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from patchbounty.config import settings
from patchbounty.core.contract_audit import ContractAuditor
from patchbounty.core.evaluation import EvaluatorPipeline, HeuristicEvaluator, RemoteEvaluator
from patchbounty.core.llm import LLMConnectionError, LLMProvider, create_provider
from patchbounty.core.payments import create_gateway
from patchbounty.core.settlement import CommitPolicy, SettlementOrchestrator
from patchbounty.core.treasury import TreasuryLedger

logger = logging.getLogger(__name__)

_ledger: Optional[TreasuryLedger] = None
_orchestrator: Optional[SettlementOrchestrator] = None
_auditor: Optional[ContractAuditor] = None


def _money(value: float) -> Decimal:
    return Decimal(str(value))


def _provider_config(name: str) -> Dict[str, Any]:
    if name == "bedrock":
        return {"region": settings.AWS_BEDROCK_REGION}
    if name == "openai":
        return {"api_key": settings.OPENAI_API_KEY}
    return {"api_key": settings.ANTHROPIC_API_KEY}


def _build_provider(name: str) -> Optional[LLMProvider]:
    try:
        return create_provider(name, _provider_config(name))
    except LLMConnectionError as e:
        logger.warning(f"Skipping evaluator tier '{name}': {e}")
        return None


def build_pipeline(tier_names: Optional[List[str]] = None) -> EvaluatorPipeline:
    """Remote tiers from EVALUATOR_TIERS, in order, then the heuristic."""
    tiers = []
    for name in tier_names if tier_names is not None else settings.EVALUATOR_TIERS:
        provider = _build_provider(name)
        if provider is None:
            continue
        tiers.append(
            RemoteEvaluator(
                provider,
                model=settings.EVALUATOR_MODELS.get(provider.name, ""),
                payout_ceiling=_money(settings.PAYOUT_CEILING),
                timeout_seconds=settings.EVALUATOR_TIMEOUT_SECONDS,
                max_tokens=settings.EVALUATOR_MAX_TOKENS,
            )
        )
    return EvaluatorPipeline(tiers, HeuristicEvaluator())


def get_ledger() -> TreasuryLedger:
    global _ledger
    if _ledger is None:
        _ledger = TreasuryLedger(
            monthly_budget=_money(settings.MONTHLY_BUDGET),
            max_per_submission=_money(settings.MAX_PAYOUT_PER_SUBMISSION),
            epoch=settings.TREASURY_EPOCH,
        )
    return _ledger


def get_orchestrator() -> SettlementOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = SettlementOrchestrator(
            pipeline=build_pipeline(),
            ledger=get_ledger(),
            payments=create_gateway(settings.PAYMENT_SERVICE_URL, settings.PAYMENT_SERVICE_TOKEN),
            subcontractor_cost=_money(settings.SUBCONTRACTOR_COST),
            subcontractor_id=settings.SUBCONTRACTOR_ID,
            subcontractor_address=settings.SUBCONTRACTOR_ADDRESS,
            payout_token=settings.PAYOUT_TOKEN,
            commit_policy=CommitPolicy(settings.PAYOUT_COMMIT_POLICY),
        )
        logger.info(
            f"Settlement engine ready: tiers={_orchestrator.pipeline.tier_names}, "
            f"policy={_orchestrator.commit_policy.value}"
        )
    return _orchestrator


def get_auditor() -> ContractAuditor:
    global _auditor
    if _auditor is None:
        name = settings.CONTRACT_AUDIT_TIER
        provider = _build_provider(name) if name else None
        _auditor = ContractAuditor(
            ledger=get_ledger(),
            provider=provider,
            model=settings.EVALUATOR_MODELS.get(provider.name, "") if provider else "",
            timeout_seconds=settings.EVALUATOR_TIMEOUT_SECONDS,
            max_tokens=settings.EVALUATOR_MAX_TOKENS,
        )
    return _auditor


def configure_services(
    ledger: Optional[TreasuryLedger] = None,
    orchestrator: Optional[SettlementOrchestrator] = None,
    auditor: Optional[ContractAuditor] = None,
) -> None:
    """Replace (or, with no arguments, reset) the process-wide instances."""
    global _ledger, _orchestrator, _auditor
    _ledger = ledger
    _orchestrator = orchestrator
    _auditor = auditor
