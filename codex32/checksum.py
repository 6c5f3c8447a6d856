"""
Checksum Codec
Creates and verifies the BIP93 checksum over a codex32 data part.

The data part (every symbol after "ms1") is read as a polynomial over
GF(32), most significant symbol first, behind a fixed virtual prefix:
a leading 1 followed by the bech32 expansion of the "ms" HRP. The
prefix keeps all-zero and all-equal strings from being codewords.

A string is valid when that polynomial, reduced modulo the generator,
equals a fixed target residue ("secretshare32" for the short code,
"secretshare32ex" for the long one). Which code applies depends only on
the length of the data part, exactly as BIP93 sets the boundaries.
"""

from dataclasses import dataclass

from codex32.encoding import HRP, hrp_expand, symbols_from_string
from codex32.errors import ChecksumMismatch, InvalidLength
from codex32.polynomial import Polynomial

# Header + payload lengths up to this get the short checksum
SHORT_DATA_MAX = 80

# Checksummed data-part lengths: short up to 93, long from 96 to 124
SHORT_MAX = 93
LONG_MIN = 96
LONG_MAX = 124

VIRTUAL_PREFIX = (1,) + hrp_expand(HRP)


@dataclass(frozen=True)
class ChecksumParams:
    """One of the two codex32 BCH codes."""
    name: str               # "short" or "long"
    generator: Polynomial   # monic, lowest degree first
    target: tuple           # residue a valid string reduces to
    code_length: int        # length of the underlying cyclic code

    @property
    def length(self) -> int:
        """Number of checksum symbols."""
        return self.generator.degree


# Generator coefficients from BIP93, lowest degree first, leading "p" = 1
SHORT = ChecksumParams(
    name="short",
    generator=Polynomial(symbols_from_string("sscmleeeqg3mep")),
    target=symbols_from_string("secretshare32"),
    code_length=93,
)

LONG = ChecksumParams(
    name="long",
    generator=Polynomial(symbols_from_string("hyk9x4hx4ef6e20p")),
    target=symbols_from_string("secretshare32ex"),
    code_length=1023,
)


def params_for_data(length: int) -> ChecksumParams:
    """Code to use when appending a checksum to `length` header+payload symbols."""
    if length <= SHORT_DATA_MAX:
        return SHORT
    if length <= LONG_MAX - LONG.length:
        return LONG
    raise InvalidLength(f"{length} symbols is too long for a codex32 string")


def params_for_checksummed(length: int) -> ChecksumParams:
    """Code that a checksummed data part of `length` symbols is verified with."""
    if SHORT.length < length <= SHORT_MAX:
        return SHORT
    if LONG_MIN <= length <= LONG_MAX:
        return LONG
    raise InvalidLength(f"Invalid codex32 data part length {length}")


def residue(symbols, params: ChecksumParams) -> tuple:
    """
    Remainder of the prefixed symbol polynomial modulo the generator.

    Returns:
        params.length symbols, most significant first.
    """
    poly = Polynomial.from_symbols(VIRTUAL_PREFIX + tuple(symbols))
    return (poly % params.generator).to_symbols(params.length)


def compute_checksum(symbols) -> tuple:
    """
    Checksum symbols for a header+payload sequence.

    Appending the result gives a data part that verifies.
    """
    symbols = tuple(symbols)
    params = params_for_data(len(symbols))
    r = residue(symbols + (0,) * params.length, params)
    return tuple(a ^ b for a, b in zip(r, params.target))


def append_checksum(symbols) -> tuple:
    symbols = tuple(symbols)
    return symbols + compute_checksum(symbols)


def checksum_error(symbols, params: ChecksumParams = None) -> tuple:
    """Residue xor target. All zero exactly when the checksum is valid."""
    symbols = tuple(symbols)
    params = params or params_for_checksummed(len(symbols))
    return tuple(a ^ b for a, b in zip(residue(symbols, params), params.target))


def verify(symbols) -> bool:
    """True if a full data part (checksum included) has a valid checksum."""
    symbols = tuple(symbols)
    try:
        params = params_for_checksummed(len(symbols))
    except InvalidLength:
        return False
    return not any(checksum_error(symbols, params))


def check(symbols) -> ChecksumParams:
    """
    Verify a data part, raising instead of returning False.

    Returns:
        The parameters of the code the string was checked against.

    Raises:
        InvalidLength: If no code applies to this length.
        ChecksumMismatch: If the residue is not the target.
    """
    symbols = tuple(symbols)
    params = params_for_checksummed(len(symbols))
    if any(checksum_error(symbols, params)):
        raise ChecksumMismatch(
            f"Invalid {params.name} checksum", checksum=params.name,
        )
    return params
