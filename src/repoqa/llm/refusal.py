"""Refusal and low-quality response detection."""

from typing import Optional, Sequence

DEFAULT_REFUSAL_PATTERNS = (
    "I cannot",
    "I can't",
    "I am not able to",
    "I'm unable to",
    "I apologize, but",
    "I'm sorry, but",
    "As an AI language model",
    "I cannot assist with",
    "violates my safety guidelines",
    "against my programming",
    "unethical",
    "illegal",
    "harmful",
    "malicious purposes",
)

REFUSAL_PREFIX_CHARS = 100
MIN_RESPONSE_LENGTH = 10


class RefusalGate:
    """Classifies generated text as a refusal or as too weak to accept.

    Refusal phrases are only looked for near the start of a response, so an
    answer that later discusses "illegal" or "harmful" code is not rejected.
    """

    def __init__(
        self,
        patterns: Sequence[str] = DEFAULT_REFUSAL_PATTERNS,
        prefix_chars: int = REFUSAL_PREFIX_CHARS,
        min_length: int = MIN_RESPONSE_LENGTH,
    ):
        self.patterns = tuple(p.lower() for p in patterns)
        self.prefix_chars = prefix_chars
        self.min_length = min_length

    def is_refusal(self, text: Optional[str]) -> bool:
        """Return True if a refusal phrase appears in the response prefix."""
        if not text:
            return False
        start = text[: self.prefix_chars].lower()
        return any(pattern in start for pattern in self.patterns)

    def is_quality_response(self, text: Optional[str]) -> bool:
        """Return False for empty or near-empty responses."""
        if not text:
            return False
        # TODO: detect responses that only echo the prompt back
        return len(text.strip()) >= self.min_length
