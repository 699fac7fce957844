"""Sensitive-surface detection for elevated (subcontracted) audits."""

import re
from typing import List, Pattern, Tuple

# Matched against the title and the whole diff text
# (file headers included), so both paths and contents count.
RISK_PATTERNS: List[Tuple[str, Pattern]] = [
    ("authentication code", re.compile(r"\bauth\w*\.(?:ts|tsx|js|py|go|rb|java|rs)\b", re.IGNORECASE)),
    ("login flow", re.compile(r"\blogin\.\w+", re.IGNORECASE)),
    ("access-control middleware", re.compile(r"middleware/(?:auth|acl|permission|access)", re.IGNORECASE)),
    ("smart contract", re.compile(r"\.sol\b|(?:^|[\s/])contracts?/", re.IGNORECASE | re.MULTILINE)),
    ("payable contract code", re.compile(r"\bpayable\b")),
    ("security module", re.compile(r"(?:^|[\s/])security(?:/|\.\w+\b)", re.IGNORECASE | re.MULTILINE)),
    ("cryptography module", re.compile(r"(?:^|[\s/])crypto/", re.IGNORECASE | re.MULTILINE)),
    ("key material", re.compile(r"(?:^|[\s/])keys/|\.pem\b|PRIVATE KEY-----", re.IGNORECASE | re.MULTILINE)),
]


def risk_reasons(title: str, diff: str) -> List[str]:
    """Labels of every sensitive-surface pattern present, in table order."""
    text = f"{title}\n{diff}"
    return [label for label, pattern in RISK_PATTERNS if pattern.search(text)]


def requires_elevated_audit(title: str, diff: str) -> bool:
    return bool(risk_reasons(title, diff))
