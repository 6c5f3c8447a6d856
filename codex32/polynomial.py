"""
Polynomials over a GaloisField.

Coefficients are stored lowest degree first: Polynomial([a0, a1, a2])
is a0 + a1*x + a2*x^2. Symbol strings are written most significant
first, so use from_symbols / to_symbols when crossing that boundary.
"""

from codex32.errors import DivisionByZero
from codex32.field import GF32, GaloisField


class Polynomial:
    """An immutable polynomial. Trailing zero coefficients are dropped."""

    __slots__ = ("coefficients", "field")

    def __init__(self, coefficients=(), field: GaloisField = GF32):
        coefficients = list(coefficients)
        while coefficients and coefficients[-1] == 0:
            coefficients.pop()
        self.coefficients = tuple(coefficients)
        self.field = field

    @classmethod
    def from_symbols(cls, symbols, field: GaloisField = GF32) -> "Polynomial":
        """Read a most-significant-first symbol sequence."""
        return cls(reversed(list(symbols)), field)

    def to_symbols(self, width: int) -> tuple:
        """Most-significant-first coefficients, zero-padded to width."""
        if self.degree >= width:
            raise ValueError(f"Degree {self.degree} does not fit in {width} symbols")
        padded = self.coefficients + (0,) * (width - len(self.coefficients))
        return tuple(reversed(padded))

    @property
    def degree(self) -> int:
        """Degree, or -1 for the zero polynomial."""
        return len(self.coefficients) - 1

    def is_zero(self) -> bool:
        return not self.coefficients

    def __eq__(self, other) -> bool:
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self.coefficients == other.coefficients and self.field is other.field

    def __hash__(self) -> int:
        return hash((self.coefficients, self.field.order))

    def __repr__(self) -> str:
        return f"Polynomial({list(self.coefficients)}, GF({self.field.order}))"

    def __getitem__(self, i: int) -> int:
        """Coefficient of x^i (zero beyond the degree)."""
        return self.coefficients[i] if 0 <= i < len(self.coefficients) else 0

    def evaluate(self, point: int) -> int:
        """Horner evaluation."""
        result = 0
        for coeff in reversed(self.coefficients):
            result = self.field.multiply(result, point) ^ coeff
        return result

    def __add__(self, other: "Polynomial") -> "Polynomial":
        size = max(len(self.coefficients), len(other.coefficients))
        return Polynomial((self[i] ^ other[i] for i in range(size)), self.field)

    # Characteristic 2: subtraction is addition
    __sub__ = __add__

    def scale(self, factor: int) -> "Polynomial":
        mul = self.field.multiply
        return Polynomial((mul(c, factor) for c in self.coefficients), self.field)

    def shift(self, n: int) -> "Polynomial":
        """Multiply by x^n."""
        return Polynomial((0,) * n + self.coefficients, self.field)

    def multiply(self, other: "Polynomial") -> "Polynomial":
        if self.is_zero() or other.is_zero():
            return Polynomial((), self.field)
        mul = self.field.multiply
        product = [0] * (len(self.coefficients) + len(other.coefficients) - 1)
        for i, a in enumerate(self.coefficients):
            if a == 0:
                continue
            for j, b in enumerate(other.coefficients):
                product[i + j] ^= mul(a, b)
        return Polynomial(product, self.field)

    __mul__ = multiply

    def divide_remainder(self, divisor: "Polynomial") -> tuple:
        """
        Long division.

        Returns:
            (quotient, remainder) with self == quotient * divisor + remainder
            and remainder.degree < divisor.degree.

        Raises:
            DivisionByZero: If the divisor is the zero polynomial.
        """
        if divisor.is_zero():
            raise DivisionByZero("Polynomial division by zero")

        field = self.field
        remainder = list(self.coefficients)
        d = divisor.degree
        lead_inv = field.invert(divisor.coefficients[-1])
        quotient = [0] * max(len(remainder) - d, 0)

        for shift in range(len(remainder) - 1 - d, -1, -1):
            top = remainder[shift + d]
            if top == 0:
                continue
            factor = field.multiply(top, lead_inv)
            quotient[shift] = factor
            for i, c in enumerate(divisor.coefficients):
                remainder[shift + i] ^= field.multiply(factor, c)

        return Polynomial(quotient, field), Polynomial(remainder[:d], field)

    def __divmod__(self, divisor: "Polynomial") -> tuple:
        return self.divide_remainder(divisor)

    def __mod__(self, divisor: "Polynomial") -> "Polynomial":
        return self.divide_remainder(divisor)[1]

    def truncate(self, n: int) -> "Polynomial":
        """Reduce modulo x^n."""
        return Polynomial(self.coefficients[:n], self.field)

    def derivative(self) -> "Polynomial":
        # In characteristic 2 only the odd-degree terms survive
        return Polynomial(
            (c if i % 2 == 1 else 0 for i, c in enumerate(self.coefficients) if i > 0),
            self.field,
        )

    def embed(self, field: GaloisField) -> "Polynomial":
        """The same coefficients read in an extension field."""
        return Polynomial(self.coefficients, field)
