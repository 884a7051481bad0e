"""Exception hierarchy for the name-discovery engine."""

from typing import List, Optional


class NameFinderError(Exception):
    """Base class for engine errors."""


class RequestValidationError(NameFinderError):
    """Raised when an AutoFind request cannot be searched at all."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems) or "invalid request")


class VocabularyError(NameFinderError):
    """Raised when the vocabulary tables are missing or malformed."""


class ProviderError(NameFinderError):
    """Raised inside a provider when a registry response cannot be interpreted.

    Providers convert it into a degraded availability result; it never
    escapes the resolver.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)
