"""
Share Model
The BIP93 layout of a codex32 string and the seed-level operations
built on it.

Data part layout (after "ms1"):

    threshold  1 symbol   "0" (not shared) or "2".."9"
    identifier 4 symbols  the same on every share of one seed
    index      1 symbol   "s" for the secret, any other symbol for a share
    payload    variable   the seed bytes as 5-bit groups
    checksum   13 or 15   see codex32.checksum

Only the payload is secret-shared. Header symbols are the same on every
share apart from the index, and the checksum is recomputed for each.
"""

import logging
import os
from dataclasses import dataclass

from codex32 import decoder, sharing
from codex32.checksum import append_checksum, check
from codex32.encoding import (
    HRP,
    bytes_to_payload,
    decode_symbols,
    encode_symbols,
    is_upper,
    payload_to_bytes,
)
from codex32.errors import (
    CharsetError,
    InsufficientShares,
    InvalidLength,
    InvalidShareSet,
)
from codex32.field import CHARSET, char_to_int

logger = logging.getLogger(__name__)

HEADER_LENGTH = 6
IDENTIFIER_LENGTH = 4
SECRET_INDEX_CHAR = "s"
THRESHOLD_CHARS = "023456789"
VALID_THRESHOLDS = tuple(int(c) for c in THRESHOLD_CHARS)

# Seed sizes BIP93 allows, in bytes
MIN_SEED_BYTES = 16
MAX_SEED_BYTES = 64

# Index order used when the caller does not pick indices
DEFAULT_INDICES = "acdefghjklmnpqrtuvwxyz023456789"


@dataclass(frozen=True)
class Share:
    """A single codex32 string, checksum excluded."""
    threshold: int      # K, or 0 for an unshared secret
    identifier: str     # 4 bech32 characters
    index: str          # share index character, "s" for the secret
    payload: tuple      # seed bytes as 5-bit symbols
    hrp: str = HRP

    def __post_init__(self):
        object.__setattr__(self, "identifier", self.identifier.lower())
        object.__setattr__(self, "index", self.index.lower())
        object.__setattr__(self, "payload", tuple(self.payload))

        if not isinstance(self.threshold, int) or self.threshold not in VALID_THRESHOLDS:
            raise InvalidShareSet(f"Threshold must be 0 or 2-9, got {self.threshold!r}")
        if len(self.identifier) != IDENTIFIER_LENGTH or any(c not in CHARSET for c in self.identifier):
            raise CharsetError(f"Identifier must be 4 bech32 characters, got {self.identifier!r}")
        if len(self.index) != 1 or self.index not in CHARSET:
            raise CharsetError(f"Share index must be one bech32 character, got {self.index!r}")
        if self.threshold == 0 and self.index != SECRET_INDEX_CHAR:
            raise InvalidShareSet("An unshared secret (threshold 0) must have index 's'")

        seed_bytes = len(payload_to_bytes(self.payload))
        if not MIN_SEED_BYTES <= seed_bytes <= MAX_SEED_BYTES:
            raise InvalidLength(
                f"Seed must be {MIN_SEED_BYTES}-{MAX_SEED_BYTES} bytes, got {seed_bytes}"
            )

    @classmethod
    def from_seed(cls, seed: bytes, threshold: int, identifier: str,
                  index: str = SECRET_INDEX_CHAR) -> "Share":
        return cls(threshold, identifier, index, bytes_to_payload(seed))

    @classmethod
    def from_symbols(cls, symbols, hrp: str = HRP) -> "Share":
        """Parse header + payload symbols (checksum already stripped)."""
        symbols = tuple(symbols)
        if len(symbols) <= HEADER_LENGTH:
            raise InvalidLength("Data part is too short to hold a header and payload")
        k = CHARSET[symbols[0]]
        if k not in THRESHOLD_CHARS:
            raise InvalidShareSet(f"Threshold must be 0 or 2-9, got {k!r}")
        return cls(
            threshold=int(k),
            identifier="".join(CHARSET[v] for v in symbols[1:5]),
            index=CHARSET[symbols[5]],
            payload=symbols[HEADER_LENGTH:],
            hrp=hrp,
        )

    @classmethod
    def from_string(cls, string: str, hrp: str = HRP) -> "Share":
        """
        Parse and verify a codex32 string.

        Raises:
            CharsetError: If the string cannot be tokenized.
            InvalidLength: On an impossible length.
            ChecksumMismatch: If the checksum does not verify. Use
                correct_string to look for a repair.
        """
        data = decode_symbols(string, hrp)
        params = check(data)
        return cls.from_symbols(data[:-params.length], hrp)

    @property
    def header(self) -> tuple:
        return (
            char_to_int(str(self.threshold)),
            *(char_to_int(c) for c in self.identifier),
            char_to_int(self.index),
        )

    @property
    def symbols(self) -> tuple:
        """Header and payload."""
        return self.header + self.payload

    @property
    def data(self) -> tuple:
        """Header, payload and checksum."""
        return append_checksum(self.symbols)

    @property
    def index_value(self) -> int:
        return char_to_int(self.index)

    @property
    def seed(self) -> bytes:
        return payload_to_bytes(self.payload)

    @property
    def is_secret(self) -> bool:
        return self.index == SECRET_INDEX_CHAR

    def to_string(self, upper: bool = False) -> str:
        return encode_symbols(self.data, self.hrp, upper)

    def __str__(self) -> str:
        return self.to_string()


def _parse(shares) -> list[Share]:
    return [s if isinstance(s, Share) else Share.from_string(s) for s in shares]


def validate_share_set(shares: list[Share]) -> int:
    """
    Check that shares belong together.

    Returns:
        The common threshold.

    Raises:
        InsufficientShares: If the list is empty.
        InvalidShareSet: On mismatched headers or lengths, duplicate
            indices, an "s" string in a K-of-N set, or more than one
            string of an unshared secret.
    """
    if not shares:
        raise InsufficientShares("No shares given")

    first = shares[0]
    for share in shares[1:]:
        if share.hrp != first.hrp:
            raise InvalidShareSet("Shares have different HRPs")
        if share.identifier != first.identifier:
            raise InvalidShareSet(
                f"Identifiers differ: {first.identifier!r} and {share.identifier!r}"
            )
        if share.threshold != first.threshold:
            raise InvalidShareSet(
                f"Thresholds differ: {first.threshold} and {share.threshold}"
            )
        if len(share.payload) != len(first.payload):
            raise InvalidShareSet("Shares have different lengths")

    indices = [share.index for share in shares]
    if len(set(indices)) != len(indices):
        raise InvalidShareSet("Two shares have the same index")
    if first.threshold == 0 and len(shares) > 1:
        raise InvalidShareSet("An unshared secret has exactly one string")
    if first.threshold > 0 and SECRET_INDEX_CHAR in indices:
        raise InvalidShareSet("The secret string ('s') cannot be combined as a share")

    return first.threshold


def encode_seed(seed: bytes, identifier: str, threshold: int = 0, upper: bool = False) -> str:
    """The secret ("s") string for a seed."""
    return Share.from_seed(seed, threshold, identifier).to_string(upper)


def decode_seed(string: str) -> bytes:
    """
    Seed bytes from a single secret string.

    Raises:
        InvalidShareSet: If the string is a share rather than the secret.
    """
    share = Share.from_string(string)
    if not share.is_secret:
        raise InvalidShareSet(
            f"Index {share.index!r} is a share, not the secret; combine {share.threshold} shares"
        )
    return share.seed


def split_seed(seed: bytes, threshold: int, identifier: str, indices: str = None,
               count: int = None, random_bytes=os.urandom) -> list[str]:
    """
    Split a seed into K-of-N codex32 shares.

    Args:
        seed: 16 to 64 seed bytes.
        threshold: K, 2 to 9.
        identifier: 4 bech32 characters shared by every string.
        indices: Share index characters. Defaults to the first `count`
            of DEFAULT_INDICES.
        count: N, when indices is not given. Defaults to K.
        random_bytes: Randomness for the K-1 free shares.

    Returns:
        Share strings in index order.
    """
    if not 2 <= threshold <= 9:
        raise InvalidShareSet(f"Threshold must be 2-9 to split, got {threshold}")
    if indices is None:
        count = count or threshold
        if count > len(DEFAULT_INDICES):
            raise InvalidShareSet(
                f"At most {len(DEFAULT_INDICES)} shares can be made, got {count}"
            )
        indices = DEFAULT_INDICES[:count]
    indices = indices.lower()

    secret = Share.from_seed(seed, threshold, identifier)
    payloads = sharing.split(
        secret.payload, threshold, [char_to_int(c) for c in indices], random_bytes,
    )
    logger.info("Split %d-byte seed into %d shares (%s, threshold %d)",
                len(seed), len(indices), secret.identifier, threshold)
    return [
        Share(threshold, secret.identifier, index, payload).to_string()
        for index, payload in zip(indices, payloads)
    ]


def _points(shares: list[Share]) -> list[tuple]:
    return [(share.index_value, share.payload) for share in shares]


def recover_secret_share(shares, upper: bool = False) -> str:
    """The secret string reconstructed from K or more shares."""
    shares = _parse(shares)
    threshold = validate_share_set(shares)
    if threshold == 0:
        return shares[0].to_string(upper)

    payload = sharing.recover(_points(shares), threshold)
    secret = Share(threshold, shares[0].identifier, SECRET_INDEX_CHAR, payload, shares[0].hrp)
    logger.info("Recovered secret %s from %d shares", secret.identifier, len(shares))
    return secret.to_string(upper)


def recover_seed(shares) -> bytes:
    """
    Seed bytes from K or more shares, or from one unshared secret.

    Args:
        shares: codex32 strings or Share objects.

    Raises:
        InsufficientShares: If fewer than K shares are given.
        InconsistentShares: If extra shares disagree with the first K.
        InvalidShareSet: If the shares do not belong together.
    """
    shares = _parse(shares)
    threshold = validate_share_set(shares)
    if threshold == 0:
        return shares[0].seed
    return payload_to_bytes(sharing.recover(_points(shares), threshold))


def derive_share(shares, index: str, upper: bool = False) -> str:
    """
    A new share at a fresh index, from K or more existing shares.

    Raises:
        InvalidShareSet: If the index is already taken or the set is
            unshared.
    """
    shares = _parse(shares)
    threshold = validate_share_set(shares)
    if threshold == 0:
        raise InvalidShareSet("An unshared secret cannot produce shares")
    index = index.lower()
    if index in (share.index for share in shares):
        raise InvalidShareSet(f"Index {index!r} is already in the set")

    points = _points(shares)
    # Recover first: checks the count and the consistency of extra shares
    sharing.recover(points, threshold)
    payload = sharing.interpolate(points[:threshold], char_to_int(index))
    return Share(threshold, shares[0].identifier, index, payload, shares[0].hrp).to_string(upper)


def relabel(shares, identifier: str) -> list[str]:
    """The same shares under a new identifier, checksums recomputed."""
    shares = _parse(shares)
    validate_share_set(shares)
    return [
        Share(s.threshold, identifier, s.index, s.payload, s.hrp).to_string()
        for s in shares
    ]


def correct_string(string: str, hrp: str = HRP) -> tuple:
    """
    Look for a repair of a string whose checksum fails.

    Returns:
        (corrected string in the input's case, Correction). Correction
        positions index the data part; describe(offset=len(hrp) + 1)
        numbers them as characters of the full string.

    Raises:
        Uncorrectable: If no correction within the decoder's radius exists.
    """
    correction = decoder.correct(decode_symbols(string, hrp))
    return encode_symbols(correction.symbols, hrp, is_upper(string)), correction
