"""
patchbounty - Payment gateway

Transfers settle through an external payment service. The service is
reached over HTTP; when no service URL is configured the disabled gateway
is used and every transfer fails with ``PaymentError``.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

import aiohttp

logger = logging.getLogger(__name__)


class PaymentError(Exception):
    """A transfer was not confirmed by the payment service."""
    pass


@dataclass(frozen=True)
class PaymentReceipt:
    transaction_id: str
    amount: Decimal
    to_address: str
    token: str


class PaymentGateway(ABC):
    """Sends a token amount to an address and returns a receipt."""

    name: str = "payments"

    @abstractmethod
    async def send(self, to_address: str, amount: Decimal, token: str, memo: str = "") -> PaymentReceipt:
        """Transfer ``amount`` or raise ``PaymentError``."""
        ...

    @property
    def enabled(self) -> bool:
        return True


class DisabledPaymentGateway(PaymentGateway):
    name = "disabled"

    async def send(self, to_address: str, amount: Decimal, token: str, memo: str = "") -> PaymentReceipt:
        raise PaymentError("payment service not configured")

    @property
    def enabled(self) -> bool:
        return False


class HttpPaymentGateway(PaymentGateway):
    """JSON-over-HTTP transfer client.

    POSTs ``{to, amount, token, memo}`` to ``<base_url>/transfers`` and
    expects ``{"transactionId": "..."}`` (``txHash`` is also accepted).
    """

    name = "http"

    def __init__(self, base_url: str, token: Optional[str] = None, timeout_seconds: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout_seconds = timeout_seconds

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def send(self, to_address: str, amount: Decimal, token: str, memo: str = "") -> PaymentReceipt:
        payload = {"to": to_address, "amount": str(amount), "token": token, "memo": memo}
        url = f"{self.base_url}/transfers"
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    url,
                    json=payload,
                    headers=self._headers(),
                    timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                ) as resp:
                    if resp.status not in (200, 201):
                        body = await resp.text()
                        raise PaymentError(f"payment service returned {resp.status}: {body[:200]}")
                    try:
                        data: Any = await resp.json()
                    except ValueError as e:
                        raise PaymentError(f"payment service returned malformed JSON: {e}")
        except asyncio.TimeoutError:
            raise PaymentError(f"payment service timed out after {self.timeout_seconds:g}s")
        except aiohttp.ClientError as e:
            raise PaymentError(f"payment service unreachable: {e}")

        tx_id = None
        if isinstance(data, dict):
            tx_id = data.get("transactionId") or data.get("txHash")
        if not isinstance(tx_id, str) or not tx_id:
            raise PaymentError("payment service response carried no transaction id")

        logger.info(f"Transferred {amount} {token} to {to_address} (tx {tx_id})")
        return PaymentReceipt(transaction_id=tx_id, amount=amount, to_address=to_address, token=token)


def create_gateway(base_url: Optional[str], token: Optional[str] = None) -> PaymentGateway:
    if not base_url:
        logger.warning("PAYMENT_SERVICE_URL not set; payouts will not be transferred")
        return DisabledPaymentGateway()
    return HttpPaymentGateway(base_url, token)
