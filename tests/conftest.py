"""
patchbounty - Shared test fixtures

Submission factories, scripted LLM providers, recording payment gateways
and fixed-result evaluator tiers used across the test suite.
"""

import asyncio
import os
import sys
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

# Ensure the project root is on sys.path so `patchbounty.*` imports resolve
PROJECT_ROOT = str(Path(__file__).resolve().parent.parent)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Isolate the app from the developer's environment before settings load
_TEST_DB_DIR = tempfile.mkdtemp(prefix="patchbounty-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR}/test.db"
os.environ["EVALUATOR_TIERS"] = "[]"
os.environ["CONTRACT_AUDIT_TIER"] = ""
os.environ.pop("PAYMENT_SERVICE_URL", None)

from patchbounty.core.evaluation.evaluators import Evaluator
from patchbounty.core.evaluation.types import (
    EvaluationResult,
    PayoutRecord,
    PayoutStatus,
    SettlementResult,
    Submission,
    Verdict,
)
from patchbounty.core.llm.providers.base import GenerateOptions, LLMProvider, LLMResponse
from patchbounty.core.payments import PaymentError, PaymentGateway, PaymentReceipt


# ---------------------------------------------------------------------------
# Sample diffs
# ---------------------------------------------------------------------------

TYPO_DIFF = """--- a/README.md
+++ b/README.md
@@ -1 +1 @@
-Teh quick start
+The quick start
"""

LEAKED_KEY_DIFF = """--- a/src/billing.js
+++ b/src/billing.js
@@ -1,2 +1,7 @@
+const API_KEY = 'sk_live_51Habc123def456';
+console.log("starting billing");
+console.log(API_KEY);
+console.log("charging card");
+console.log("done");
"""

AUTH_MIDDLEWARE_DIFF = """--- a/src/middleware/auth.ts
+++ b/src/middleware/auth.ts
@@ -1,3 +1,20 @@
+interface TokenClaims {
+  sub: string;
+}
+const MAX_TOKEN_LENGTH = 4096;
+// Validate the bearer token before decoding
+export function sanitizeToken(raw: string): string {
+  if (!raw || raw.length > MAX_TOKEN_LENGTH) {
+    throw new Error("Invalid token");
+  }
+  return raw.replace(/[^A-Za-z0-9._-]/g, "");
+}
+// Reject requests without a valid token
+res.status(401)
"""


# ---------------------------------------------------------------------------
# Submission factory
# ---------------------------------------------------------------------------

@pytest.fixture
def make_submission():
    """Factory fixture that creates Submission instances with sane defaults."""

    def _make(**overrides) -> Submission:
        fields = dict(
            title="docs: correct typo in README",
            author="octocat",
            repo="acme/widgets",
            files_changed=1,
            additions=1,
            deletions=1,
            diff=TYPO_DIFF,
            payout_address="0x1111111111111111111111111111111111111111",
        )
        fields.update(overrides)
        return Submission(**fields)

    return _make


@pytest.fixture
def typo_submission(make_submission):
    return make_submission()


@pytest.fixture
def leaked_key_submission(make_submission):
    return make_submission(
        title="feat: add billing client",
        files_changed=1,
        additions=5,
        deletions=0,
        diff=LEAKED_KEY_DIFF,
    )


@pytest.fixture
def auth_submission(make_submission):
    return make_submission(
        title="fix: harden auth middleware against token injection",
        files_changed=1,
        additions=60,
        deletions=5,
        diff=AUTH_MIDDLEWARE_DIFF,
    )


# ---------------------------------------------------------------------------
# Scripted LLM provider
# ---------------------------------------------------------------------------

class ScriptedProvider(LLMProvider):
    """Provider that returns canned text, raises, or stalls."""

    def __init__(
        self,
        provider_name: str = "scripted",
        text: str = "",
        error: Optional[Exception] = None,
        delay: float = 0.0,
        available: bool = True,
    ):
        self._name = provider_name
        self.text = text
        self.error = error
        self.delay = delay
        self.available = available
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    async def is_available(self) -> bool:
        return self.available

    async def generate(self, messages, system: str, options: GenerateOptions) -> LLMResponse:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return LLMResponse(text=self.text, model=options.model, provider=self._name)


@pytest.fixture
def scripted_provider():
    return ScriptedProvider


# ---------------------------------------------------------------------------
# Fixed-result evaluator tier
# ---------------------------------------------------------------------------

class StaticEvaluator(Evaluator):
    """Tier that always returns the same result."""

    def __init__(self, result: EvaluationResult):
        self.result = result

    @property
    def name(self) -> str:
        return self.result.tier

    async def attempt(self, submission: Submission) -> EvaluationResult:
        return self.result


def static_result(
    verdict: Verdict = Verdict.PASS,
    score: int = 80,
    payout: str = "12.34",
    requires_audit: bool = False,
    highlights=("Clean change",),
) -> EvaluationResult:
    return EvaluationResult(
        verdict=verdict,
        score=score,
        reasoning="[static] Looks good.",
        highlights=tuple(highlights),
        concerns=(),
        requires_elevated_audit=requires_audit,
        suggested_payout=Decimal(payout),
        tier="static",
    )


@pytest.fixture
def make_static_tier():
    def _make(**kwargs) -> StaticEvaluator:
        return StaticEvaluator(static_result(**kwargs))

    return _make


# ---------------------------------------------------------------------------
# Payment gateways
# ---------------------------------------------------------------------------

class RecordingGateway(PaymentGateway):
    """Gateway that records every transfer and optionally fails."""

    name = "recording"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[tuple] = []

    async def send(self, to_address: str, amount: Decimal, token: str, memo: str = "") -> PaymentReceipt:
        self.sent.append((to_address, amount, token, memo))
        if self.fail:
            raise PaymentError("insufficient gas")
        return PaymentReceipt(
            transaction_id=f"0xtx{len(self.sent)}", amount=amount, to_address=to_address, token=token
        )


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def failing_gateway():
    return RecordingGateway(fail=True)


# ---------------------------------------------------------------------------
# Settlement results
# ---------------------------------------------------------------------------

@pytest.fixture
def make_settlement_result(make_submission):
    """Factory for SettlementResult records used by result-log tests."""

    def _make(verdict: Verdict = Verdict.PASS, score: int = 70, amount: str = "5.00", idx: int = 0):
        payout = PayoutRecord(amount=Decimal(amount), to_address="0xabc")
        payout.finalize(PayoutStatus.SENT if verdict == Verdict.PASS else PayoutStatus.SKIPPED)
        return SettlementResult(
            id=f"eval-{idx}",
            timestamp=1700000000.0 + idx,
            submission=make_submission(),
            evaluation=static_result(verdict=verdict, score=score, payout=amount),
            payout=payout,
        )

    return _make


# ---------------------------------------------------------------------------
# aiohttp stand-ins
# ---------------------------------------------------------------------------

def mock_session(response=None, post_error=None):
    """Build a ClientSession stand-in whose post() yields ``response``."""
    post_cm = MagicMock()
    post_cm.__aenter__ = AsyncMock(return_value=response)
    post_cm.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    if post_error:
        session.post = MagicMock(side_effect=post_error)
    else:
        session.post = MagicMock(return_value=post_cm)

    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=session)
    session_cm.__aexit__ = AsyncMock(return_value=False)
    return session_cm, session


def mock_response(status=200, data=None, text="", json_error=None):
    resp = MagicMock()
    resp.status = status
    resp.json = AsyncMock(return_value=data, side_effect=json_error)
    resp.text = AsyncMock(return_value=text)
    return resp
