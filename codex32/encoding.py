"""
String <-> Symbol Encoding
Turns codex32 strings into symbol tuples and back, and regroups seed
bytes into 5-bit payload symbols.

A codex32 string is an HRP ("ms"), the separator "1", and a data part
written in the bech32 alphabet. Either case is accepted, but never both
in one string.
"""

from codex32.errors import CharsetError, InvalidLength
from codex32.field import CHARSET, CHARSET_REV

HRP = "ms"
SEPARATOR = "1"


def hrp_expand(hrp: str) -> tuple:
    """bech32 HRP expansion: high bits, a zero, then low bits of each char."""
    return (
        tuple(ord(c) >> 5 for c in hrp)
        + (0,)
        + tuple(ord(c) & 31 for c in hrp)
    )


def symbols_from_string(data: str) -> tuple:
    """Symbols of a bare data-part string (no HRP, no separator)."""
    try:
        return tuple(CHARSET_REV[c] for c in data.lower())
    except KeyError as e:
        raise CharsetError(f"Invalid bech32 character {e.args[0]!r}") from None


def string_from_symbols(symbols, upper: bool = False) -> str:
    s = "".join(CHARSET[v] for v in symbols)
    return s.upper() if upper else s


def decode_symbols(string: str, hrp: str = HRP) -> tuple:
    """
    Tokenize a full codex32 string into its data-part symbols.

    Args:
        string: e.g. "ms10tests..." or "MS12NAMEA...".
        hrp: Expected human-readable part.

    Returns:
        Tuple of symbol values for everything after the separator.

    Raises:
        CharsetError: On non-printable characters, mixed case, a missing
            separator, a different HRP, or characters outside the alphabet.
    """
    if any(ord(c) < 33 or ord(c) > 126 for c in string):
        raise CharsetError("String contains non-printable or non-ASCII characters")
    if string.lower() != string and string.upper() != string:
        raise CharsetError("String mixes upper and lower case")

    string = string.lower()
    pos = string.rfind(SEPARATOR)
    if pos < 1:
        raise CharsetError("Missing human-readable part or separator")
    if string[:pos] != hrp.lower():
        raise CharsetError(f"Expected HRP {hrp!r}, got {string[:pos]!r}")

    return symbols_from_string(string[pos + 1:])


def encode_symbols(symbols, hrp: str = HRP, upper: bool = False) -> str:
    """Inverse of decode_symbols."""
    s = hrp.lower() + SEPARATOR + string_from_symbols(symbols)
    return s.upper() if upper else s


def is_upper(string: str) -> bool:
    """True if the string is written in upper case."""
    return string.upper() == string and string.lower() != string


def _regroup(values, from_bits: int, to_bits: int, pad: bool) -> tuple:
    acc = 0
    bits = 0
    out = []
    maxv = (1 << to_bits) - 1
    for value in values:
        if value < 0 or value >> from_bits:
            raise InvalidLength(f"Value {value} does not fit in {from_bits} bits")
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & maxv)
        acc &= (1 << bits) - 1
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits:
        raise InvalidLength(f"{bits} bits of padding is more than a whole symbol")
    return tuple(out)


def bytes_to_payload(data: bytes) -> tuple:
    """
    Split bytes into 5-bit symbols, zero-padding the last one.

    16 bytes become 26 symbols (2 padding bits).
    """
    return _regroup(data, 8, 5, pad=True)


def payload_to_bytes(symbols) -> bytes:
    """
    Join 5-bit symbols back into bytes.

    Leftover padding bits (at most 4) are dropped whatever their value.

    Raises:
        InvalidLength: If 5 or more bits would be left over.
    """
    return bytes(_regroup(symbols, 5, 8, pad=False))
