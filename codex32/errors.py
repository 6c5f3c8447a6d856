"""
Error taxonomy.

Every failure the core can report is one of these. They all derive from
ValueError, so callers that only care about "bad input" can catch that.
"""


class Codex32Error(ValueError):
    """Base class for all codex32 errors."""


class DivisionByZero(Codex32Error, ZeroDivisionError):
    """Inversion of the zero field element was attempted."""


class CharsetError(Codex32Error):
    """A string could not be tokenized into bech32 symbols."""


class InvalidLength(Codex32Error):
    """A string, payload or seed has a length codex32 does not allow."""


class ChecksumMismatch(Codex32Error):
    """The checksum residue is not the expected target."""

    def __init__(self, message: str, checksum: str = ""):
        super().__init__(message)
        self.checksum = checksum


class Uncorrectable(Codex32Error):
    """The error decoder could not find a correction within its radius."""

    def __init__(self, reason: str):
        super().__init__(f"Uncorrectable: {reason}")
        self.reason = reason


class InsufficientShares(Codex32Error):
    """Fewer than K distinct shares were supplied."""


class InconsistentShares(Codex32Error):
    """The supplied shares do not lie on a single degree-(K-1) polynomial."""


class InvalidShareSet(Codex32Error):
    """Duplicate or reserved indices, mismatched headers, or a bad threshold."""
