from __future__ import annotations

import re
from typing import Iterable

DEFAULT_PATTERNS = [
    r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}",
]


def mask_secrets(text: str, secrets: Iterable[str]) -> str:
    """Replaces e-mail addresses and the given literal secrets with ***."""
    masked = text
    for pattern in DEFAULT_PATTERNS:
        masked = re.sub(pattern, "***", masked)
    # longest first so that a secret containing another is masked whole
    for secret in sorted({s for s in secrets if s}, key=len, reverse=True):
        masked = masked.replace(secret, "***")
    return masked
