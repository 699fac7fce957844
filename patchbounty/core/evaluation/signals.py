"""Diff signal extraction.

String-pattern heuristics standing in for real static analysis. Everything
downstream (rubric, pricing) consumes a ``DiffSignals`` value, so a real
analyzer can replace ``PatternSignalExtractor`` without touching them.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Pattern, Tuple

from .types import Submission


# Credential-like literals. Any hit disqualifies the submission outright.
CREDENTIAL_PATTERNS: List[Tuple[str, Pattern]] = [
    ("stripe-style secret key", re.compile(r"\b[sr]k_(?:live|test)_")),
    ("AWS access key id", re.compile(r"\bAKIA[0-9A-Z]{16}\b")),
    ("GitHub token", re.compile(r"\bgh[pousr]_[A-Za-z0-9]{20,}")),
    ("private key block", re.compile(r"-----BEGIN (?:[A-Z]+ )?PRIVATE KEY-----")),
    (
        "hardcoded secret assignment",
        re.compile(
            r"(?i)\b\w*(?:api[_-]?key|secret|passw(?:or)?d|access[_-]?token|private[_-]?key)\w*"
            r"\s*[:=]\s*['\"][^'\"\s]{4,}['\"]"
        ),
    ),
]

_TYPES = re.compile(
    r":\s*(?:string|number|boolean|void|Map|Set|Array|Promise|Record"
    r"|int|str|float|bool|bytes|dict|list|Dict|List|Optional)\b|\)\s*->\s*\w+"
)
_INTERFACE = re.compile(r"\binterface\s+\w+|\bclass\s+\w+\((?:Protocol|ABC)\)")
_CLASS = re.compile(r"\bclass\s+\w+")
_EXPORT = re.compile(r"\bexport\s+(?:function|class|const|interface)")
_ERROR_HANDLING = re.compile(
    r"throw new Error|\.catch\(|\btry\s*[{:]|if\s*\(!|\braise\s+\w+|\bexcept\b"
)
_CLEANUP = re.compile(
    r"clearInterval|clearTimeout|\.destroy\(|\.close\(|\.terminate\(|\.delete\(|\.dispose\("
)
_HEADERS = re.compile(r"setHeader|X-RateLimit|Content-Type")
_CONSTANTS = re.compile(r"\bconst\s+[A-Z_]{3,}\b|^\+?\s*[A-Z][A-Z0-9_]{2,}\s*(?::\s*\w+\s*)?=\s", re.MULTILINE)
_COMMENTS = re.compile(r"(?://|#)\s*[A-Z][a-z]")
_STATUS_CODES = re.compile(r"\.status\(\d{3}\)|res\.json|status_code\s*=\s*\d{3}")
_INPUT_VALIDATION = re.compile(r"sanitize|validate|escape|\.replace\(|pattern|regex|DANGEROUS", re.IGNORECASE)
_SECURITY_FIX = re.compile(r"XSS|CSRF|injection|vulnerability|sanitize", re.IGNORECASE)
_DEBUG_PRINTS = re.compile(r"console\.(?:log|debug|warn)|\bprint\(")
_TYPE_SUPPRESSION = re.compile(r"@ts-ignore|#\s*type:\s*ignore")
_UNRESOLVED = re.compile(r"\b(?:TODO|FIXME|HACK|XXX)\b")
_WEAK_TYPES = re.compile(r":\s*(?:any|Any)\b")


@dataclass(frozen=True)
class DiffSignals:
    """Structural and hygiene features detected in a submission."""
    line_count: int
    has_types: bool = False
    has_interface: bool = False
    has_class: bool = False
    has_export: bool = False
    has_error_handling: bool = False
    has_cleanup: bool = False
    has_headers: bool = False
    has_constants: bool = False
    comment_count: int = 0
    has_status_codes: bool = False
    has_input_validation: bool = False
    has_security_fix: bool = False
    debug_print_count: int = 0
    has_type_suppression: bool = False
    has_unresolved_markers: bool = False
    has_weak_types: bool = False
    credential_hits: Tuple[str, ...] = ()
    is_feature: bool = False
    is_fix: bool = False

    @property
    def has_credentials(self) -> bool:
        return bool(self.credential_hits)


def detect_credentials(text: str) -> Tuple[str, ...]:
    """Return the labels of every credential-like pattern found in ``text``."""
    return tuple(label for label, pattern in CREDENTIAL_PATTERNS if pattern.search(text))


class SignalExtractor(ABC):
    """Capability: submission text -> signals."""

    @abstractmethod
    def extract(self, submission: Submission) -> DiffSignals:
        ...


class PatternSignalExtractor(SignalExtractor):
    """Regex-based extractor. Pure and deterministic."""

    def extract(self, submission: Submission) -> DiffSignals:
        d = submission.diff
        title = submission.title.strip()
        return DiffSignals(
            line_count=submission.line_count,
            has_types=bool(_TYPES.search(d)),
            has_interface=bool(_INTERFACE.search(d)),
            has_class=bool(_CLASS.search(d)),
            has_export=bool(_EXPORT.search(d)),
            has_error_handling=bool(_ERROR_HANDLING.search(d)),
            has_cleanup=bool(_CLEANUP.search(d)),
            has_headers=bool(_HEADERS.search(d)),
            has_constants=bool(_CONSTANTS.search(d)),
            comment_count=len(_COMMENTS.findall(d)),
            has_status_codes=bool(_STATUS_CODES.search(d)),
            has_input_validation=bool(_INPUT_VALIDATION.search(d)),
            has_security_fix=bool(_SECURITY_FIX.search(f"{title}\n{d}")),
            debug_print_count=len(_DEBUG_PRINTS.findall(d)),
            has_type_suppression=bool(_TYPE_SUPPRESSION.search(d)),
            has_unresolved_markers=bool(_UNRESOLVED.search(d)),
            has_weak_types=bool(_WEAK_TYPES.search(d)),
            credential_hits=detect_credentials(d),
            is_feature=title.startswith("feat:"),
            is_fix=title.startswith("fix:"),
        )
