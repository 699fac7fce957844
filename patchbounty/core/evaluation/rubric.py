"""Deterministic scoring rubric: signals -> four sub-scores and a verdict."""

from dataclasses import dataclass
from typing import List, Tuple

from .signals import DiffSignals
from .types import MAX_CONCERNS, MAX_HIGHLIGHTS, SubScores, Verdict

PASS_THRESHOLD = 60
SUB_SCORE_MAX = 25

# Starting point for each sub-score before adjustments
BASELINE = SubScores(quality=12, security=15, impact=10, practice=12)


def _clamp(value: int) -> int:
    return max(0, min(SUB_SCORE_MAX, value))


@dataclass(frozen=True)
class RubricOutcome:
    sub_scores: SubScores
    verdict: Verdict
    disqualified: bool
    highlights: Tuple[str, ...]
    concerns: Tuple[str, ...]
    summary: str

    @property
    def total(self) -> int:
        return self.sub_scores.total


def score_signals(s: DiffSignals) -> SubScores:
    quality = BASELINE.quality
    if s.has_types:
        quality += 4
    if s.has_interface:
        quality += 3
    if s.has_class:
        quality += 2
    if s.has_export:
        quality += 1
    if s.comment_count >= 2:
        quality += 2
    if s.has_type_suppression:
        quality -= 5
    if s.has_weak_types:
        quality -= 3
    if s.debug_print_count > 3:
        quality -= 8

    security = BASELINE.security
    if s.has_input_validation:
        security += 5
    if s.has_security_fix:
        security += 5
    if s.debug_print_count > 2:
        security -= 3

    impact = BASELINE.impact
    if s.line_count > 40:
        impact += 5
    if s.line_count > 20:
        impact += 3
    if s.has_security_fix:
        impact += 5
    if s.is_feature:
        impact += 3
    if s.is_fix:
        impact += 4
    if s.has_unresolved_markers:
        impact -= 2

    practice = BASELINE.practice
    if s.has_error_handling:
        practice += 4
    if s.has_cleanup:
        practice += 3
    if s.has_headers:
        practice += 2
    if s.has_constants:
        practice += 2
    if s.has_status_codes:
        practice += 2
    if s.has_type_suppression:
        practice -= 5
    practice -= s.debug_print_count

    # A leaked credential zeroes security no matter what else was detected
    if s.has_credentials:
        security = 0

    return SubScores(
        quality=_clamp(quality),
        security=_clamp(security),
        impact=_clamp(impact),
        practice=_clamp(practice),
    )


def _highlights(s: DiffSignals) -> List[str]:
    out = []
    if s.has_interface or s.has_types:
        out.append("Explicit typing and interface declarations")
    if s.has_error_handling:
        out.append("Error paths handled with descriptive failures")
    if s.has_cleanup:
        out.append("Resources released explicitly, no leaked timers or handles")
    if s.has_input_validation:
        out.append("Input is validated and sanitized before use")
    if s.has_security_fix:
        out.append("Patches a security vulnerability")
    if s.has_class:
        out.append("Logic encapsulated in well-scoped classes")
    if s.has_headers:
        out.append("Sets correct HTTP response headers")
    if s.has_constants:
        out.append("Tunables extracted into named constants")
    return out


def _concerns(s: DiffSignals) -> List[str]:
    out = []
    if s.has_credentials:
        out.append(f"CRITICAL: hardcoded credential in source ({s.credential_hits[0]})")
    if s.debug_print_count > 3:
        out.append(f"{s.debug_print_count} debug print statements left in, not production-ready")
    if s.has_type_suppression:
        out.append("Type checking suppressed without justification")
    if s.has_unresolved_markers:
        out.append("Unresolved TODO/FIXME markers indicate incomplete work")
    if s.has_weak_types:
        out.append("Untyped 'any' declarations weaken type safety")
    if not s.has_error_handling and not s.has_security_fix:
        out.append("No explicit error handling for edge cases")
    return out


def _summary(s: DiffSignals, scores: SubScores, passed: bool) -> str:
    breakdown = (
        f"Quality {scores.quality}/25, Security {scores.security}/25, "
        f"Impact {scores.impact}/25, Practices {scores.practice}/25."
    )
    if s.has_credentials and s.debug_print_count > 3:
        return (
            f"AUTOMATIC REJECT: hardcoded credential detected alongside "
            f"{s.debug_print_count} debugging statements. Credentials must never be "
            f"committed to version control. Score: {breakdown}"
        )
    if s.has_credentials:
        return (
            "SECURITY VIOLATION: hardcoded credential detected. Committing secrets to "
            f"source control is an automatic fail. Score: {scores.total}/100."
        )
    if s.has_security_fix and s.has_input_validation:
        return f"Security-focused contribution with thorough defensive validation. Score: {breakdown}"
    if s.has_class and s.has_cleanup and s.line_count > 50:
        return f"Production-grade infrastructure with explicit lifecycle management. Score: {breakdown}"
    if s.has_types and s.has_error_handling and s.line_count > 30:
        return f"Solid, well-typed change with proper error handling. Score: {breakdown}"
    threshold = "Meets quality threshold." if passed else "Does not meet minimum quality threshold."
    return f"Code review complete. Score: {breakdown} {threshold}"


def evaluate_rubric(signals: DiffSignals) -> RubricOutcome:
    """Score a submission's signals. Same signals always give the same outcome."""
    scores = score_signals(signals)
    disqualified = signals.has_credentials
    passed = scores.total >= PASS_THRESHOLD and not disqualified
    return RubricOutcome(
        sub_scores=scores,
        verdict=Verdict.PASS if passed else Verdict.FAIL,
        disqualified=disqualified,
        highlights=tuple(_highlights(signals)[:MAX_HIGHLIGHTS]),
        concerns=tuple(_concerns(signals)[:MAX_CONCERNS]),
        summary=_summary(signals, scores, passed),
    )
