"""
codex32 — Checksummed, Secret-Shared BIP32 Seeds
A reference implementation of BIP93.

A seed is written as a string of bech32 characters with a strong
checksum. It can be split into N shares, any K of which rebuild it, and
a string with a few mistyped characters can be repaired:

1. Checksum — BCH codes over GF(32) that detect up to 8 errors
2. Decoder  — finds and fixes up to 4 substituted characters
3. Sharing  — Shamir's secret sharing, one GF(32) symbol at a time

Every step is simple enough to do by hand with paper worksheets. This
package does the same arithmetic, bit for bit.

Usage:
    from codex32 import split_seed, recover_seed
    shares = split_seed(seed, threshold=3, identifier="cash", count=5)
    assert recover_seed(shares[:3]) == seed
"""

from codex32.checksum import compute_checksum, verify
from codex32.decoder import Correction, correct
from codex32.derive import ChaCha20Stream, derive_share_set
from codex32.encoding import (
    bytes_to_payload,
    decode_symbols,
    encode_symbols,
    payload_to_bytes,
)
from codex32.errors import (
    CharsetError,
    ChecksumMismatch,
    Codex32Error,
    DivisionByZero,
    InconsistentShares,
    InsufficientShares,
    InvalidLength,
    InvalidShareSet,
    Uncorrectable,
)
from codex32.share import (
    Share,
    correct_string,
    decode_seed,
    derive_share,
    encode_seed,
    recover_secret_share,
    recover_seed,
    relabel,
    split_seed,
)
from codex32.sharing import recover as shamir_recover, split as shamir_split

__version__ = "0.1.0"
__all__ = [
    "Share",
    "Correction",
    "ChaCha20Stream",
    "encode_seed",
    "decode_seed",
    "split_seed",
    "recover_seed",
    "recover_secret_share",
    "derive_share",
    "derive_share_set",
    "relabel",
    "correct_string",
    "correct",
    "compute_checksum",
    "verify",
    "shamir_split",
    "shamir_recover",
    "decode_symbols",
    "encode_symbols",
    "bytes_to_payload",
    "payload_to_bytes",
    "Codex32Error",
    "DivisionByZero",
    "CharsetError",
    "InvalidLength",
    "ChecksumMismatch",
    "Uncorrectable",
    "InsufficientShares",
    "InconsistentShares",
    "InvalidShareSet",
]
