"""
codex32 — Basic Usage Example

Demonstrates backing up a wallet seed as 3-of-5 codex32 shares,
recovering it, and repairing a mistyped share.
"""

import logging
import os
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from codex32 import (
    Codex32Error,
    Share,
    correct_string,
    derive_share_set,
    encode_seed,
    recover_seed,
    split_seed,
)


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    # A fresh 128-bit master seed
    seed = os.urandom(16)

    print("=" * 50)
    print("  codex32 — Seed Backup")
    print("=" * 50)

    print(f"\nSeed:   {seed.hex()}")
    print(f"Secret: {encode_seed(seed, 'cash', upper=True)}")

    # Five shares, any three recover the seed
    shares = split_seed(seed, threshold=3, identifier="cash", count=5)
    print("\nShares:")
    for string in shares:
        print(f"  {string.upper()}")

    recovered = recover_seed(shares[1:4])
    print(f"\nRecovered from shares {[Share.from_string(s).index for s in shares[1:4]]}: "
          f"{'OK' if recovered == seed else 'MISMATCH'}")

    # Two shares are not enough
    try:
        recover_seed(shares[:2])
        print("  ERROR: Should have failed!")
    except Codex32Error as e:
        print(f"Two shares rejected: {e}")

    # A share with two typos
    typo = list(shares[0])
    typo[10] = "q" if typo[10] != "q" else "p"
    typo[20] = "q" if typo[20] != "q" else "p"
    typo = "".join(typo)
    print(f"\nMistyped share: {typo.upper()}")
    fixed, correction = correct_string(typo)
    for line in correction.describe(offset=3):
        print(f"  {line}")
    print(f"Repaired: {'OK' if fixed == shares[0] else 'MISMATCH'}")

    # The same seed always gives the same deterministic share set
    dated = derive_share_set(seed, 3, "cash", 5, unique_string="2026-10-19")
    print(f"\nDeterministic set reproducible: "
          f"{dated == derive_share_set(seed, 3, 'cash', 5, unique_string='2026-10-19')}")


if __name__ == "__main__":
    main()
