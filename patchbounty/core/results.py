"""Recent settlement results, newest first, with aggregate stats."""

import threading
from collections import deque
from decimal import Decimal
from typing import Any, Deque, Dict, List

from .evaluation.types import ZERO, SettlementResult, Verdict

MAX_RESULTS = 50


class ResultLog:
    """Bounded in-memory history of settlement results.

    Only the most recent ``max_results`` are kept; older entries are
    evicted. Readers receive plain-dict snapshots.
    """

    def __init__(self, max_results: int = MAX_RESULTS):
        self._results: Deque[SettlementResult] = deque(maxlen=max_results)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    def add(self, result: SettlementResult) -> None:
        with self._lock:
            self._results.appendleft(result)

    def recent(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [r.to_dict() for r in self._results]

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            results = list(self._results)
        return compute_stats(results)


def compute_stats(results: List[SettlementResult]) -> Dict[str, Any]:
    total = len(results)
    passed = [r for r in results if r.evaluation.verdict == Verdict.PASS]
    total_paid = sum((r.payout.amount for r in passed), ZERO)
    avg_score = Decimal(sum(r.evaluation.score for r in results)) / total if total else Decimal(0)

    return {
        "totalEvaluated": total,
        "passed": len(passed),
        "failed": total - len(passed),
        "passRate": f"{len(passed) / total * 100:.1f}" if total else "0",
        "totalPaid": f"{total_paid:.2f}",
        "averageScore": f"{avg_score:.1f}",
    }
