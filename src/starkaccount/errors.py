"""Exception hierarchy for starkaccount.

Pure-computation errors (usage, encoding, signing) also subclass
``ValueError`` so callers catching the builtin keep working.
"""

from __future__ import annotations
from typing import Optional


class StarkAccountError(Exception):
    """Base class for every error raised by starkaccount."""


class UsageError(StarkAccountError, ValueError):
    """The caller asked for something this account cannot do (e.g. batching)."""


class EncodingError(StarkAccountError, ValueError):
    """A value cannot be represented as a field element."""


class SigningError(StarkAccountError, ValueError):
    """A hash is outside the range the curve's signing scheme accepts."""


class ProviderError(StarkAccountError):
    """A call through the provider failed."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class NetworkError(ProviderError):
    """Transport failure, timeout, or a rejected submission."""


class ContractReadError(ProviderError):
    """The contract call itself failed (e.g. undeployed account, assert failure)."""
