"""Treasury ledger: the shared budget that gates every payout.

Income (contract audit revenue) and expenditure (bounties, subcontractor
fees) are tracked as primitive counters. The net balance is always
recomputed as ``budget + earned - spent``, never adjusted by a delta.

All mutators hold one lock for the whole compute -> validate -> commit
sequence, so two concurrent authorizations can never both pass a balance
check that only one of them can satisfy.
"""

import logging
import threading
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Tuple, Union

from patchbounty.core.evaluation.types import ZERO, to_money

logger = logging.getLogger(__name__)

Amount = Union[Decimal, float, int, str]


class LedgerError(Exception):
    """Base class for treasury errors."""
    pass


class InvalidAmountError(LedgerError, ValueError):
    """Amount is negative, zero, or not a finite number."""
    pass


class InsufficientFundsError(LedgerError):
    """A debit that must be paid in full exceeds the net balance."""
    pass


class AuthorizationStatus(str, Enum):
    AUTHORIZED = "authorized"
    QUEUED = "queued"


@dataclass(frozen=True)
class TreasuryState:
    """Read-only snapshot of the ledger."""
    monthly_budget: Decimal
    total_earned: Decimal
    total_spent: Decimal
    audit_count: int
    bounty_count: int
    max_per_submission: Decimal
    subcontractor_spend: Decimal
    queued_count: int
    queued_amount: Decimal
    net_balance: Decimal
    epoch: str

    def to_dict(self) -> dict:
        return {
            "monthly_budget": str(self.monthly_budget),
            "total_earned": str(self.total_earned),
            "total_spent": str(self.total_spent),
            "audit_count": self.audit_count,
            "bounty_count": self.bounty_count,
            "max_per_submission": str(self.max_per_submission),
            "subcontractor_spend": str(self.subcontractor_spend),
            "queued_count": self.queued_count,
            "queued_amount": str(self.queued_amount),
            "net_balance": str(self.net_balance),
            "epoch": self.epoch,
        }


@dataclass(frozen=True)
class PayoutAuthorization:
    requested: Decimal
    approved_amount: Decimal
    status: AuthorizationStatus
    capped: bool
    note: str
    net_balance: Decimal

    @property
    def authorized(self) -> bool:
        return self.status == AuthorizationStatus.AUTHORIZED


def _validated(amount: Amount) -> Decimal:
    try:
        value = Decimal(repr(amount)) if isinstance(amount, float) else Decimal(amount)
    except (ArithmeticError, ValueError, TypeError):
        raise InvalidAmountError(f"Not a valid amount: {amount!r}")
    if not value.is_finite() or value <= 0:
        raise InvalidAmountError(f"Amount must be a positive finite number: {amount!r}")
    return to_money(value)


class TreasuryLedger:
    """Process-wide accumulator of earned and spent funds."""

    def __init__(self, monthly_budget: Amount, max_per_submission: Amount, epoch: str = ""):
        self._budget = _validated(monthly_budget)
        self._max_per_submission = _validated(max_per_submission)
        self._epoch = epoch
        self._earned = ZERO
        self._spent = ZERO
        self._audit_count = 0
        self._bounty_count = 0
        self._subcontractor_spend = ZERO
        self._queued_count = 0
        self._queued_amount = ZERO
        self._net_balance = self._budget
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _recompute(self) -> None:
        self._net_balance = self._budget + self._earned - self._spent

    def _snapshot(self) -> TreasuryState:
        return TreasuryState(
            monthly_budget=self._budget,
            total_earned=self._earned,
            total_spent=self._spent,
            audit_count=self._audit_count,
            bounty_count=self._bounty_count,
            max_per_submission=self._max_per_submission,
            subcontractor_spend=self._subcontractor_spend,
            queued_count=self._queued_count,
            queued_amount=self._queued_amount,
            net_balance=self._net_balance,
            epoch=self._epoch,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def snapshot(self) -> TreasuryState:
        with self._lock:
            return self._snapshot()

    @property
    def net_balance(self) -> Decimal:
        with self._lock:
            return self._net_balance

    @property
    def max_per_submission(self) -> Decimal:
        return self._max_per_submission

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def record_revenue(self, amount: Amount) -> TreasuryState:
        """Credit audit revenue and bump the audit count."""
        value = _validated(amount)
        with self._lock:
            self._earned += value
            self._audit_count += 1
            self._recompute()
            logger.info(f"Revenue +{value} recorded (balance {self._net_balance})")
            return self._snapshot()

    def _cap(self, requested: Decimal) -> Tuple[Decimal, bool, List[str]]:
        if requested <= self._max_per_submission:
            return requested, False, []
        logger.warning(f"Payout {requested} capped to {self._max_per_submission}")
        return (
            self._max_per_submission,
            True,
            [f"Payout capped at ${self._max_per_submission} (per-submission limit)."],
        )

    def _queue(self, requested: Decimal, proposed: Decimal, capped: bool, notes: List[str]) -> PayoutAuthorization:
        self._queued_count += 1
        self._queued_amount += proposed
        logger.warning(f"Payout {proposed} queued, balance {self._net_balance}")
        return PayoutAuthorization(
            requested=requested,
            approved_amount=proposed,
            status=AuthorizationStatus.QUEUED,
            capped=capped,
            note=" ".join(notes),
            net_balance=self._net_balance,
        )

    def authorize_payout(self, amount: Amount) -> PayoutAuthorization:
        """Cap, check and (if affordable) debit a bounty payout.

        A payout the balance cannot cover is queued in full, not partially
        paid. Queued amounts are tracked but do not touch the balance.
        """
        requested = _validated(amount)
        with self._lock:
            proposed, capped, notes = self._cap(requested)
            if proposed > self._net_balance:
                notes.append(
                    f"Treasury budget exceeded (${self._net_balance} remaining). Queued for next epoch."
                )
                return self._queue(requested, proposed, capped, notes)

            self._spent += proposed
            self._bounty_count += 1
            self._recompute()
            logger.info(f"Payout {proposed} authorized (balance {self._net_balance})")
            return PayoutAuthorization(
                requested=requested,
                approved_amount=proposed,
                status=AuthorizationStatus.AUTHORIZED,
                capped=capped,
                note=" ".join(notes),
                net_balance=self._net_balance,
            )

    def defer_payout(self, amount: Amount, reason: str) -> PayoutAuthorization:
        """Queue a payout without a balance check (e.g. its audit was unaffordable)."""
        requested = _validated(amount)
        with self._lock:
            proposed, capped, notes = self._cap(requested)
            notes.append(f"{reason} Queued for next epoch.")
            return self._queue(requested, proposed, capped, notes)

    def record_subcontractor_spend(self, amount: Amount) -> TreasuryState:
        """Debit a subcontractor fee.

        Raises:
            InsufficientFundsError: if the fee exceeds the net balance.
        """
        value = _validated(amount)
        with self._lock:
            if value > self._net_balance:
                raise InsufficientFundsError(
                    f"Subcontractor fee ${value} exceeds balance ${self._net_balance}"
                )
            self._spent += value
            self._subcontractor_spend += value
            self._recompute()
            logger.info(f"Subcontractor spend {value} recorded (balance {self._net_balance})")
            return self._snapshot()

    def release_payout(self, amount: Amount) -> TreasuryState:
        """Reverse a previously authorized payout whose transfer failed."""
        value = _validated(amount)
        with self._lock:
            if self._bounty_count == 0 or value > self._spent - self._subcontractor_spend:
                raise LedgerError(f"No authorized payout of ${value} to release")
            self._spent -= value
            self._bounty_count -= 1
            self._recompute()
            logger.info(f"Payout {value} released (balance {self._net_balance})")
            return self._snapshot()
