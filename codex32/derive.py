"""
Deterministic Share Generation
Reproducible share sets derived from the seed itself.

Splitting normally draws the K-1 free shares from os.urandom, so two
runs give unrelated share sets. Deriving everything from the seed lets a
user regenerate (or audit) the exact same shares later:

  seed + header + unique string -> master key       (PBKDF2-HMAC-SHA512)
  master key -> payload key, index key              (HKDF, separate contexts)
  payload key -> ChaCha20 keystream -> free shares
  index key   -> ChaCha20 keystream -> share index order

The unique string (a date, a counter) gives a fresh, unlinkable share
set for the same seed whenever it changes.

The key schedule and the index shuffle are specific to this package.
Share sets derived here are valid codex32 strings that any implementation
can combine, but other tools deriving from the same seed and unique
string will produce different shares.
"""

import logging

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from codex32.errors import InvalidShareSet
from codex32.field import CHARSET
from codex32.share import HEADER_LENGTH, SECRET_INDEX_CHAR, Share, split_seed
from codex32.sharing import MAX_THRESHOLD

logger = logging.getLogger(__name__)

# Same iteration count BIP39 uses for its seed KDF
KDF_ITERATIONS = 2048
MASTER_KEY_SIZE = 64
STREAM_KEY_SIZE = 32    # ChaCha20 key
STREAM_NONCE = bytes(16)

# HKDF contexts, so the two keystreams are independent
_PAYLOAD_CONTEXT = b"codex32-share-payloads-v1"
_INDEX_CONTEXT = b"codex32-share-indices-v1"


class ChaCha20Stream:
    """
    A deterministic random_bytes source: successive bytes of the ChaCha20
    keystream under a 32-byte key.

    Pass an instance wherever a random_bytes callable is accepted.
    """

    def __init__(self, key: bytes, nonce: bytes = STREAM_NONCE):
        if len(key) != STREAM_KEY_SIZE:
            raise ValueError(f"ChaCha20 key must be {STREAM_KEY_SIZE} bytes")
        cipher = Cipher(algorithms.ChaCha20(key, nonce), mode=None)
        self._keystream = cipher.encryptor()
        self.bytes_used = 0

    def __call__(self, count: int) -> bytes:
        self.bytes_used += count
        return self._keystream.update(bytes(count))


def derive_key(seed: bytes, header: str, unique_string: str = "") -> bytes:
    """Master key for a seed, salted with the share header and unique string."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA512(),
        length=MASTER_KEY_SIZE,
        salt=(header + unique_string).encode("utf-8"),
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(seed)


def _expand(master_key: bytes, context: bytes) -> bytes:
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=STREAM_KEY_SIZE,
        salt=None,
        info=context,
    )
    return hkdf.derive(master_key)


def shuffle_indices(random_bytes, exclude: str = SECRET_INDEX_CHAR) -> str:
    """
    Order the share index characters by random byte keys.

    Each character gets one byte from the stream, redrawn on collision,
    and the characters are sorted by their bytes.
    """
    chars = [c for c in CHARSET if c not in exclude]
    keys = {}
    for c in chars:
        key = random_bytes(1)
        while key in keys.values():
            key = random_bytes(1)
        keys[c] = key
    return "".join(sorted(chars, key=keys.__getitem__))


def derive_share_set(seed: bytes, threshold: int, identifier: str, count: int,
                     unique_string: str = "") -> list[str]:
    """
    Deterministically split a seed into `count` shares.

    The same arguments always give the same strings; the indices used
    are the first `count` of a seed-dependent shuffle.

    Args:
        seed: 16 to 64 seed bytes.
        threshold: K, 2 to 9.
        identifier: 4 bech32 characters.
        count: N, from K up to 31.
        unique_string: Changes the share set without changing the seed.
    """
    if not threshold <= count <= MAX_THRESHOLD:
        raise InvalidShareSet(f"Share count must be between {threshold} and {MAX_THRESHOLD}")

    secret = Share.from_seed(seed, threshold, identifier)
    header = secret.to_string()[:len(secret.hrp) + 1 + HEADER_LENGTH]
    master_key = derive_key(seed, header, unique_string)

    indices = shuffle_indices(ChaCha20Stream(_expand(master_key, _INDEX_CONTEXT)))[:count]
    shares = split_seed(
        seed, threshold, identifier,
        indices=indices,
        random_bytes=ChaCha20Stream(_expand(master_key, _PAYLOAD_CONTEXT)),
    )
    logger.debug("Derived %d shares for %s deterministically", len(shares), secret.identifier)
    return shares
