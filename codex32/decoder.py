"""
Error Decoder
Locates and repairs substitution errors in a codex32 data part.

Both codex32 checksums are BCH codes over GF(32) whose generator roots
live in GF(1024). For each code we find those roots once, pick a
primitive n-th root of unity beta for which 2t of them are consecutive
powers beta^c .. beta^(c+2t-1), and decode the standard way:

1. Syndromes: evaluate the error polynomial (the checksum residue minus
   its target) at the consecutive roots.
2. Error locator: Peterson-Gorenstein-Zierler, trying t errors first and
   fewer until the syndrome system is non-singular.
3. Chien search: the locator's roots beta^-p give the error positions.
4. Forney: the error magnitude at each position.
5. Re-verify the corrected string.

This is a bounded-distance decoder. Up to t = 4 errors are always
corrected. Beyond that it either reports Uncorrectable or, for some
patterns, returns a different valid-looking string. Callers must treat a
correction as a suggestion to re-check the marked characters, not as
proof the original was recovered.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache, reduce
from math import gcd

from codex32.checksum import (
    ChecksumParams,
    checksum_error,
    params_for_checksummed,
    verify,
)
from codex32.errors import Codex32Error, Uncorrectable
from codex32.field import GaloisField, gf1024, int_to_char
from codex32.polynomial import Polynomial

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CodeStructure:
    """Where a generator's roots sit in GF(1024)."""
    field: GaloisField
    length: int     # n, the order of beta
    beta: int       # primitive n-th root of unity
    offset: int     # c, first of the consecutive root exponents
    radius: int     # t, number of correctable errors

    def root(self, k: int) -> int:
        """beta^k."""
        return self.field.power(self.beta, k)


@lru_cache(maxsize=None)
def code_structure(params: ChecksumParams) -> CodeStructure:
    """
    Find beta, the consecutive-root offset and the correction radius.

    Raises:
        Codex32Error: If the generator does not split in GF(1024) or has no
            run of consecutive roots. Neither happens for the BIP93 codes.
    """
    ext = gf1024()
    generator = params.generator.embed(ext)
    roots = [x for x in range(1, ext.order) if generator.evaluate(x) == 0]
    if len(roots) != generator.degree:
        raise Codex32Error(f"The {params.name} generator does not split in GF(1024)")

    group = ext.order - 1
    step = reduce(gcd, (ext.log[r] for r in roots), group)
    n = group // step
    if n != params.code_length:
        raise Codex32Error(
            f"The {params.name} generator defines a code of length {n}, "
            f"expected {params.code_length}"
        )

    # Roots as powers of beta0 = alpha^step. Rescaling the exponents by a
    # unit v is the same as switching to beta = beta0^(1/v); keep the v
    # with the longest run of consecutive exponents.
    exponents = {ext.log[r] // step for r in roots}
    best_run, best_v, best_start = 0, 1, 0
    for v in range(1, n):
        if gcd(v, n) != 1:
            continue
        scaled = {e * v % n for e in exponents}
        for start in scaled:
            if (start - 1) % n in scaled:
                continue
            run = 0
            while (start + run) % n in scaled:
                run += 1
            if run > best_run:
                best_run, best_v, best_start = run, v, start

    if best_run < 2:
        raise Codex32Error(f"The {params.name} generator has no consecutive roots")

    beta = ext.alpha_power(step * pow(best_v, -1, n))
    structure = CodeStructure(
        field=ext,
        length=n,
        beta=beta,
        offset=best_start,
        radius=best_run // 2,
    )
    logger.debug(
        "%s code: length %d, roots beta^%d..beta^%d, corrects %d errors",
        params.name, n, best_start, best_start + best_run - 1, structure.radius,
    )
    return structure


def syndromes(symbols, params: ChecksumParams = None) -> tuple:
    """
    S_i = E(beta^(c+i)) for i in [0, 2t).

    E is only known modulo the generator, but the generator vanishes at
    every beta^(c+i), so the residue difference gives the same values.
    """
    symbols = tuple(symbols)
    params = params or params_for_checksummed(len(symbols))
    structure = code_structure(params)
    error = Polynomial.from_symbols(checksum_error(symbols, params), structure.field)
    return tuple(
        error.evaluate(structure.root(structure.offset + i))
        for i in range(2 * structure.radius)
    )


def _solve(matrix: list, rhs: list, field: GaloisField):
    """Gauss-Jordan elimination. Returns None if the matrix is singular."""
    n = len(rhs)
    rows = [list(row) + [b] for row, b in zip(matrix, rhs)]
    for col in range(n):
        pivot = next((r for r in range(col, n) if rows[r][col]), None)
        if pivot is None:
            return None
        rows[col], rows[pivot] = rows[pivot], rows[col]
        inv = field.invert(rows[col][col])
        rows[col] = [field.multiply(x, inv) for x in rows[col]]
        for r in range(n):
            factor = rows[r][col]
            if r != col and factor:
                rows[r] = [x ^ field.multiply(factor, y) for x, y in zip(rows[r], rows[col])]
    return tuple(row[n] for row in rows)


def error_locator(synd, structure: CodeStructure):
    """
    Peterson-Gorenstein-Zierler.

    For nu errors the locator L(x) = 1 + L1 x + ... + Lnu x^nu satisfies
    sum_j Lj S_(i+nu-j) = S_(i+nu) for i in [0, nu). The largest nu whose
    system is non-singular is the number of errors.

    Returns:
        The locator polynomial over GF(1024), or None if no nu <= t works.
    """
    field = structure.field
    for nu in range(structure.radius, 0, -1):
        matrix = [[synd[i + nu - j] for j in range(1, nu + 1)] for i in range(nu)]
        rhs = [synd[i + nu] for i in range(nu)]
        solution = _solve(matrix, rhs, field)
        if solution is not None:
            return Polynomial((1,) + solution, field)
    return None


def chien_search(locator: Polynomial, length: int, structure: CodeStructure) -> list:
    """
    Degrees p in [0, length) with locator(beta^-p) == 0.

    Degree p is the symbol at data index length - 1 - p.
    """
    return [p for p in range(length) if locator.evaluate(structure.root(-p)) == 0]


def error_magnitudes(synd, locator: Polynomial, degrees, structure: CodeStructure) -> list:
    """
    Forney: Y = Omega(X^-1) * X^(1-c) / L'(X^-1), Omega = S*L mod x^2t.

    Raises:
        Uncorrectable: If a magnitude is zero or outside GF(32).
    """
    field = structure.field
    omega = (Polynomial(synd, field) * locator).truncate(2 * structure.radius)
    derivative = locator.derivative()

    magnitudes = []
    for p in degrees:
        x_inv = structure.root(-p)
        denominator = derivative.evaluate(x_inv)
        if denominator == 0:
            raise Uncorrectable("repeated root in the error locator")
        y = field.multiply(
            field.divide(omega.evaluate(x_inv), denominator),
            structure.root(p * (1 - structure.offset)),
        )
        if y == 0 or y >= 32:
            raise Uncorrectable("error magnitude is not a GF(32) symbol")
        magnitudes.append(y)
    return magnitudes


@dataclass(frozen=True)
class Correction:
    """
    An error pattern found by the decoder and the string it repairs.

    positions index the data part (0 is the threshold symbol); each
    magnitude is xored into the symbol at the same position.
    """
    original: tuple
    symbols: tuple
    positions: tuple
    magnitudes: tuple

    @property
    def weight(self) -> int:
        return len(self.positions)

    def as_dict(self) -> dict:
        return dict(zip(self.positions, self.magnitudes))

    def describe(self, offset: int = 0) -> list[str]:
        """One 'position N: X -> Y' line per corrected character."""
        return [
            f"position {pos + offset}: "
            f"{int_to_char(self.original[pos], upper=True)} -> "
            f"{int_to_char(self.symbols[pos], upper=True)}"
            for pos in self.positions
        ]


def correct(symbols) -> Correction:
    """
    Repair a data part whose checksum fails.

    Args:
        symbols: Full data part, checksum included.

    Returns:
        A Correction of weight at most t.

    Raises:
        InvalidLength: If no checksum applies to this length.
        Codex32Error: If the checksum is already valid.
        Uncorrectable: If no correction within the radius exists.
    """
    symbols = tuple(symbols)
    params = params_for_checksummed(len(symbols))
    if not any(checksum_error(symbols, params)):
        raise Codex32Error("Checksum is already valid, nothing to correct")

    structure = code_structure(params)
    synd = syndromes(symbols, params)
    if not any(synd):
        raise Uncorrectable("error pattern is invisible to the syndromes")

    locator = error_locator(synd, structure)
    if locator is None:
        raise Uncorrectable(f"more than {structure.radius} errors")

    degrees = chien_search(locator, len(symbols), structure)
    logger.debug("Locator degree %d, %d roots in range", locator.degree, len(degrees))
    if len(degrees) != locator.degree:
        raise Uncorrectable("error locator does not factor over the string positions")

    magnitudes = error_magnitudes(synd, locator, degrees, structure)

    corrected = list(symbols)
    found = sorted(
        (len(symbols) - 1 - p, y) for p, y in zip(degrees, magnitudes)
    )
    for pos, y in found:
        corrected[pos] ^= y
    corrected = tuple(corrected)

    if not verify(corrected):
        raise Uncorrectable("corrected string still fails the checksum")

    logger.info("Corrected %d symbol(s) under the %s checksum", len(found), params.name)
    return Correction(
        original=symbols,
        symbols=corrected,
        positions=tuple(pos for pos, _ in found),
        magnitudes=tuple(y for _, y in found),
    )


def correction_table(length: int, max_errors: int = 1):
    """
    Residues produced by small error patterns, for lookup by hand.

    For a data part of `length` symbols, yields one entry per pattern of
    up to `max_errors` substitutions (1 or 2): the residue a worksheet
    computes for a string with that error, and the errors themselves.

    Yields:
        (residue, ((position, delta), ...)) with residue and delta as
        upper-case characters.
    """
    if max_errors not in (1, 2):
        raise ValueError("max_errors must be 1 or 2")
    params = params_for_checksummed(length)
    width = params.length

    # Residue of x^k for every degree k a data symbol can occupy
    basis = []
    term = Polynomial((1,))
    for _ in range(length):
        basis.append(term % params.generator)
        term = term.shift(1)

    def entry(poly, errors):
        residue = tuple(a ^ b for a, b in zip(poly.to_symbols(width), params.target))
        return (
            "".join(int_to_char(v, upper=True) for v in residue),
            tuple((pos, int_to_char(d, upper=True)) for pos, d in errors),
        )

    for i in range(length):
        for d1 in range(1, 32):
            single = basis[length - 1 - i].scale(d1)
            yield entry(single, ((i, d1),))
            if max_errors == 1:
                continue
            for j in range(i + 1, length):
                for d2 in range(1, 32):
                    double = single + basis[length - 1 - j].scale(d2)
                    yield entry(double, ((i, d1), (j, d2)))
