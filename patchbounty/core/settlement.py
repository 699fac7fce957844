"""
patchbounty - Settlement orchestrator

Drives one submission end to end:

    evaluate -> (sensitive + PASS) hire subcontractor -> authorize payout
             -> transfer -> finalize PayoutRecord -> record result

Ledger mutations go through ``TreasuryLedger`` only; the orchestrator never
touches balances directly.
"""

import logging
import time
import uuid
from dataclasses import replace
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .evaluation.pipeline import EvaluatorPipeline
from .evaluation.types import (
    MAX_HIGHLIGHTS,
    ZERO,
    AuditEngagement,
    EvaluationResult,
    PayoutRecord,
    PayoutStatus,
    SettlementResult,
    Submission,
)
from .payments import PaymentError, PaymentGateway
from .results import ResultLog
from .treasury import InsufficientFundsError, TreasuryLedger, TreasuryState

logger = logging.getLogger(__name__)


class CommitPolicy(str, Enum):
    """What a failed transfer does to an already authorized debit.

    ``optimistic`` keeps the debit and reports the payout as sent;
    ``confirmed`` releases the debit and reports the payout as failed.
    """
    OPTIMISTIC = "optimistic"
    CONFIRMED = "confirmed"


class SettlementOrchestrator:
    """Turns a submission into a verdict, a ledger entry and a payout."""

    def __init__(
        self,
        pipeline: EvaluatorPipeline,
        ledger: TreasuryLedger,
        payments: PaymentGateway,
        subcontractor_cost: Decimal = Decimal("1.00"),
        subcontractor_id: str = "security-oracle",
        subcontractor_address: str = "",
        payout_token: str = "USDC",
        commit_policy: CommitPolicy = CommitPolicy.OPTIMISTIC,
        results: Optional[ResultLog] = None,
    ):
        self.pipeline = pipeline
        self.ledger = ledger
        self.payments = payments
        self.subcontractor_cost = subcontractor_cost
        self.subcontractor_id = subcontractor_id
        self.subcontractor_address = subcontractor_address
        self.payout_token = payout_token
        self.commit_policy = CommitPolicy(commit_policy)
        self.results = results or ResultLog()

    # ------------------------------------------------------------------
    # Query interface
    # ------------------------------------------------------------------

    def list_results(self) -> List[Dict[str, Any]]:
        return self.results.recent()

    def get_stats(self) -> Dict[str, Any]:
        return self.results.stats()

    def get_treasury_state(self) -> TreasuryState:
        return self.ledger.snapshot()

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    async def settle(self, submission: Submission, source: str = "api") -> SettlementResult:
        record_id = f"eval-{uuid.uuid4()}"
        outcome = await self.pipeline.evaluate(submission)
        evaluation = outcome.result
        notes: List[str] = []
        audit: Optional[AuditEngagement] = None
        audit_blocked = False

        if evaluation.passed and evaluation.requires_elevated_audit:
            evaluation, audit, audit_blocked = await self._engage_subcontractor(record_id, evaluation)

        amount = ZERO
        status = PayoutStatus.SKIPPED
        tx_id: Optional[str] = None
        if not evaluation.passed or evaluation.suggested_payout <= ZERO:
            logger.debug(f"No payout for {record_id} ({evaluation.verdict.value})")
        elif audit_blocked:
            auth = self.ledger.defer_payout(
                evaluation.suggested_payout,
                f"Security review fee ${self.subcontractor_cost} exceeds treasury balance; not paid un-audited.",
            )
            amount, status = auth.approved_amount, PayoutStatus.QUEUED
            notes.append(auth.note)
        else:
            auth = self.ledger.authorize_payout(evaluation.suggested_payout)
            amount = auth.approved_amount
            if auth.note:
                notes.append(auth.note)
            if auth.authorized:
                status, tx_id, note = await self._transfer(record_id, submission.payout_address, amount)
                if note:
                    notes.append(note)
            else:
                status = PayoutStatus.QUEUED

        payout = PayoutRecord(
            amount=amount,
            to_address=submission.payout_address,
            token=self.payout_token,
            audit=audit,
        )
        payout.finalize(status, tx_id)

        if notes:
            evaluation = replace(evaluation, reasoning=f"{evaluation.reasoning} {' '.join(notes)}")

        result = SettlementResult(
            id=record_id,
            timestamp=time.time(),
            submission=submission,
            evaluation=evaluation,
            payout=payout,
            source=source,
            tier_failures=outcome.failures,
        )
        logger.info(
            f"Settled {record_id} '{submission.title}': {evaluation.verdict.value} "
            f"score={evaluation.score} tier={evaluation.tier} "
            f"payout={payout.amount} {payout.status.value}"
        )

        self.results.add(result)
        return result

    async def _engage_subcontractor(
        self, record_id: str, evaluation: EvaluationResult
    ) -> Tuple[EvaluationResult, AuditEngagement, bool]:
        """Debit and pay the fixed-cost reviewer; surface the hire in the narrative."""
        cost = self.subcontractor_cost
        try:
            self.ledger.record_subcontractor_spend(cost)
        except InsufficientFundsError as e:
            logger.warning(f"Cannot engage {self.subcontractor_id} for {record_id}: {e}")
            audit = AuditEngagement(triggered=False, cost=cost, subcontractor_id=self.subcontractor_id)
            evaluation = replace(
                evaluation,
                reasoning=(
                    f"HIGH-RISK: Security audit required but the treasury cannot cover "
                    f"the ${cost} review fee. {evaluation.reasoning}"
                ),
            )
            return evaluation, audit, True

        tx_id = None
        fee_note = ""
        try:
            receipt = await self.payments.send(
                self.subcontractor_address, cost, self.payout_token, memo=f"security review {record_id}"
            )
            tx_id = receipt.transaction_id
        except PaymentError as e:
            logger.error(f"Subcontractor payment for {record_id} failed: {e}")
            fee_note = f"Review fee transfer not confirmed ({e}). "

        highlight = f"Security review contracted from {self.subcontractor_id}"
        evaluation = replace(
            evaluation,
            reasoning=(
                f"HIGH-RISK: Security audit triggered. Hired {self.subcontractor_id} "
                f"(${cost} {self.payout_token}). {fee_note}{evaluation.reasoning}"
            ),
            highlights=((highlight,) + evaluation.highlights)[:MAX_HIGHLIGHTS],
        )
        audit = AuditEngagement(
            triggered=True, cost=cost, subcontractor_id=self.subcontractor_id, transaction_id=tx_id
        )
        return evaluation, audit, False

    async def _transfer(
        self, record_id: str, to_address: str, amount: Decimal
    ) -> Tuple[PayoutStatus, Optional[str], str]:
        """Send an authorized payout and apply the commit policy on failure."""
        try:
            receipt = await self.payments.send(to_address, amount, self.payout_token, memo=f"bounty {record_id}")
        except PaymentError as e:
            logger.error(f"Payout transfer for {record_id} failed: {e}")
            if self.commit_policy == CommitPolicy.CONFIRMED:
                self.ledger.release_payout(amount)
                return PayoutStatus.FAILED, None, f"Transfer failed ({e}); treasury debit released."
            return PayoutStatus.SENT, None, f"Transfer not confirmed ({e}); bounty recorded as sent."
        return PayoutStatus.SENT, receipt.transaction_id, ""
