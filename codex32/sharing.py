"""
Shamir's Secret Sharing over GF(32)
Split a symbol vector into N shares where any K can reconstruct it.

Every symbol position is shared independently with its own random
polynomial of degree K-1. Shares are points on those polynomials: a
share index (a GF(32) element) and the vector of values there. The
secret is the value at index 16, the symbol "s", rather than at zero,
so that the secret itself is a share like any other and BIP93 shares
interpolate to a correctly labelled, correctly checksummed string.

Fewer than K shares are consistent with every possible secret: any K-1
points plus an arbitrary value at "s" define exactly one polynomial.
"""

import logging
import os

from codex32.errors import (
    Codex32Error,
    InconsistentShares,
    InsufficientShares,
    InvalidShareSet,
)
from codex32.field import divide, multiply

logger = logging.getLogger(__name__)

# The "s" symbol: the index the secret sits at
SECRET_INDEX = 16

# Distinct share indices available besides the secret
MAX_THRESHOLD = 31


def _check_threshold(threshold: int) -> None:
    if not 1 <= threshold <= MAX_THRESHOLD:
        raise InvalidShareSet(f"Threshold must be between 1 and {MAX_THRESHOLD}, got {threshold}")


def _check_points(points: list) -> None:
    indices = [index for index, _ in points]
    if any(not 0 <= index < 32 for index in indices):
        raise InvalidShareSet("Share indices must be GF(32) elements")
    if len(set(indices)) != len(indices):
        raise InvalidShareSet("Share indices must be distinct")
    if len({len(symbols) for _, symbols in points}) > 1:
        raise InvalidShareSet("Shares have different lengths")


def lagrange_weights(indices, x: int) -> list[int]:
    """
    Weights w_i with f(x) = sum w_i * f(indices[i]) for any polynomial f
    of degree below len(indices).
    """
    weights = []
    for i, xi in enumerate(indices):
        numerator = 1
        denominator = 1
        for j, xj in enumerate(indices):
            if i == j:
                continue
            numerator = multiply(numerator, x ^ xj)
            denominator = multiply(denominator, xi ^ xj)
        weights.append(divide(numerator, denominator))
    return weights


def interpolate(points, x: int) -> tuple:
    """
    Evaluate, at x, the polynomials through the given points.

    Args:
        points: (index, symbols) pairs with distinct indices and
            equal-length symbol vectors.
        x: Index to evaluate at.

    Returns:
        The symbol vector at x.
    """
    points = [(index, tuple(symbols)) for index, symbols in points]
    if not points:
        raise InsufficientShares("Need at least one share to interpolate")
    _check_points(points)

    weights = lagrange_weights([index for index, _ in points], x)
    result = []
    for pos in range(len(points[0][1])):
        value = 0
        for w, (_, symbols) in zip(weights, points):
            value ^= multiply(w, symbols[pos])
        result.append(value)
    return tuple(result)


def random_symbols(count: int, random_bytes=os.urandom) -> tuple:
    """count uniform GF(32) symbols, one per byte of randomness."""
    data = random_bytes(count)
    if len(data) != count:
        raise Codex32Error(f"Randomness source returned {len(data)} bytes, wanted {count}")
    return tuple(b & 31 for b in data)


def split(secret, threshold: int, indices, random_bytes=os.urandom) -> list[tuple]:
    """
    Split a secret symbol vector into shares.

    The first K-1 requested indices get uniformly random vectors; with the
    secret at "s" they fix a random degree-(K-1) polynomial per position,
    and every other index is evaluated on it.

    Args:
        secret: The symbol vector to share.
        threshold: Shares needed to reconstruct (K).
        indices: Share indices to produce, distinct and never 16.
        random_bytes: Source of randomness, called as random_bytes(n).
            Defaults to os.urandom; inject a deterministic one for tests.

    Returns:
        One symbol vector per requested index, in the same order.

    Raises:
        InvalidShareSet: If the parameters are invalid.
    """
    secret = tuple(secret)
    indices = list(indices)
    _check_threshold(threshold)
    if SECRET_INDEX in indices:
        raise InvalidShareSet("The secret index 's' cannot be used for a share")
    _check_points([(index, secret) for index in indices])
    if len(indices) < threshold:
        raise InvalidShareSet(
            f"Threshold {threshold} needs at least {threshold} shares, got {len(indices)}"
        )

    anchors = [(SECRET_INDEX, secret)]
    for index in indices[:threshold - 1]:
        anchors.append((index, random_symbols(len(secret), random_bytes)))

    shares = [interpolate(anchors, index) for index in indices]
    logger.debug("Split %d symbols into %d shares, threshold %d", len(secret), len(shares), threshold)
    return shares


def recover(points, threshold: int) -> tuple:
    """
    Reconstruct the secret from K or more shares.

    Extra shares beyond the first K are checked against the polynomial
    the first K define, so a corrupted or foreign share is reported
    rather than silently producing a wrong secret.

    Args:
        points: (index, symbols) pairs.
        threshold: K.

    Returns:
        The secret symbol vector.

    Raises:
        InsufficientShares: If fewer than K distinct indices are given.
        InconsistentShares: If the extra shares disagree with the first K.
        InvalidShareSet: On duplicate indices with different values, the
            secret index, or mismatched lengths.
    """
    _check_threshold(threshold)

    distinct = {}
    for index, symbols in points:
        symbols = tuple(symbols)
        if distinct.setdefault(index, symbols) != symbols:
            raise InvalidShareSet(f"Two different shares with index {index}")
    if SECRET_INDEX in distinct:
        raise InvalidShareSet("The secret index 's' cannot be used for a share")
    points = list(distinct.items())
    _check_points(points)

    if len(points) < threshold:
        raise InsufficientShares(f"Need at least {threshold} shares, got {len(points)}")

    basis = points[:threshold]
    for index, symbols in points[threshold:]:
        if interpolate(basis, index) != symbols:
            raise InconsistentShares(f"Share with index {index} does not match the others")

    return interpolate(basis, SECRET_INDEX)


def verify_shares(points, threshold: int, secret) -> bool:
    """Check that a set of shares reconstructs the given secret."""
    try:
        return recover(points, threshold) == tuple(secret)
    except Codex32Error:
        return False
