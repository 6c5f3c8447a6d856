"""
GF(32) Arithmetic
The 32-element field every codex32 symbol lives in.

Elements are the integers 0..31, read as polynomials over GF(2) modulo
x^5 + x^3 + 1, the same field bech32 uses. Addition is xor. Multiplication,
division and powers go through log/antilog tables built once at import
from the primitive element alpha = 2 ("z" in the bech32 alphabet).

The same table type also builds GF(1024) as a quadratic extension of
GF(32). The checksum's generator polynomials only split there, so the
error decoder needs it.
"""

from functools import lru_cache

from codex32.errors import CharsetError, Codex32Error, DivisionByZero

# The bech32 alphabet: CHARSET[v] is the character for symbol value v
CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
CHARSET_REV = {c: i for i, c in enumerate(CHARSET)}

# x^5 + x^3 + 1, the bech32 reduction polynomial
GF32_MODULUS = 0b101001


def _bech32_multiply(a: int, b: int) -> int:
    """Shift-and-add multiplication. Only used to build the tables."""
    res = 0
    for i in range(5):
        if (b >> i) & 1:
            res ^= a
        a <<= 1
        if a & 32:
            a ^= GF32_MODULUS
    return res


def _find_generator(order: int, multiply) -> int:
    for candidate in range(2, order):
        x = candidate
        steps = 1
        while x != 1:
            x = multiply(x, candidate)
            steps += 1
        if steps == order - 1:
            return candidate
    raise Codex32Error(f"No primitive element in a field of order {order}")


class GaloisField:
    """
    A finite field of characteristic 2 backed by log/antilog tables.

    Args:
        order: Number of elements (a power of two).
        multiply: Reference multiplication, used once to fill the tables.
        generator: A primitive element. Searched for if not given.
    """

    def __init__(self, order: int, multiply, generator: int = None):
        self.order = order
        self.generator = generator or _find_generator(order, multiply)

        exp = []
        log = [None] * order
        x = 1
        for i in range(order - 1):
            exp.append(x)
            log[x] = i
            x = multiply(x, self.generator)
        if x != 1 or None in log[1:]:
            raise Codex32Error(f"{self.generator} is not primitive in GF({order})")

        # Tuples, so the tables cannot be mutated after construction
        self.exp = tuple(exp)
        self.log = tuple(log)

    def __repr__(self) -> str:
        return f"GaloisField({self.order})"

    @staticmethod
    def add(a: int, b: int) -> int:
        """Addition (and subtraction): xor of the bit representations."""
        return a ^ b

    def multiply(self, a: int, b: int) -> int:
        if a == 0 or b == 0:
            return 0
        return self.exp[(self.log[a] + self.log[b]) % (self.order - 1)]

    def invert(self, a: int) -> int:
        """Multiplicative inverse. Zero has none."""
        if a == 0:
            raise DivisionByZero(f"0 has no inverse in GF({self.order})")
        return self.exp[-self.log[a] % (self.order - 1)]

    def divide(self, a: int, b: int) -> int:
        if b == 0:
            raise DivisionByZero(f"Attempt to divide {a} by 0 in GF({self.order})")
        if a == 0:
            return 0
        return self.exp[(self.log[a] - self.log[b]) % (self.order - 1)]

    def power(self, a: int, n: int) -> int:
        """a^n, negative n allowed for nonzero a."""
        if a == 0:
            if n < 0:
                raise DivisionByZero(f"0 has no inverse in GF({self.order})")
            return 1 if n == 0 else 0
        return self.exp[(self.log[a] * n) % (self.order - 1)]

    def alpha_power(self, n: int) -> int:
        """generator^n."""
        return self.exp[n % (self.order - 1)]


GF32 = GaloisField(32, _bech32_multiply, generator=2)

add = GF32.add
multiply = GF32.multiply
invert = GF32.invert
divide = GF32.divide
power = GF32.power


def char_to_int(c: str) -> int:
    """Symbol value of a single bech32 character (either case)."""
    try:
        return CHARSET_REV[c.lower()]
    except KeyError:
        raise CharsetError(f"Invalid bech32 character: {c!r}") from None


def int_to_char(v: int, upper: bool = False) -> str:
    """bech32 character for a symbol value."""
    if not 0 <= v < 32:
        raise Codex32Error(f"Symbol value must be 0-31, got {v}")
    c = CHARSET[v]
    return c.upper() if upper else c


@lru_cache(maxsize=None)
def gf1024() -> GaloisField:
    """
    GF(1024) as GF(32)[z] / (z^2 + z + b).

    b is the first GF(32) element for which the quadratic has no root.
    The element c0 + c1*z is stored as the integer c0 + 32*c1, so GF(32)
    embeds as the integers below 32.
    """
    b = next(
        b for b in range(1, 32)
        if all(multiply(x, x) ^ x ^ b for x in range(32))
    )

    def ext_multiply(u: int, v: int) -> int:
        u0, u1 = u & 31, u >> 5
        v0, v1 = v & 31, v >> 5
        hi = multiply(u1, v1)
        # z^2 = z + b
        c0 = multiply(u0, v0) ^ multiply(hi, b)
        c1 = multiply(u0, v1) ^ multiply(u1, v0) ^ hi
        return c0 | (c1 << 5)

    return GaloisField(1024, ext_multiply)
