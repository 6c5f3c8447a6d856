"""
codex32 — Integration Tests
Tests the full seed -> strings -> shares -> seed pipeline, including
string repair and deterministic share sets.
"""

import itertools
import sys
from pathlib import Path

# Add parent to path for local development
sys.path.insert(0, str(Path(__file__).parent.parent))

from codex32 import (
    CharsetError,
    ChecksumMismatch,
    InsufficientShares,
    InvalidLength,
    InvalidShareSet,
    Share,
    Uncorrectable,
    correct_string,
    decode_seed,
    derive_share,
    derive_share_set,
    encode_seed,
    recover_secret_share,
    recover_seed,
    relabel,
    split_seed,
)
from codex32.derive import ChaCha20Stream, shuffle_indices
from codex32.share import validate_share_set

VECTOR_1 = "ms10testsxxxxxxxxxxxxxxxxxxxxxxxxxx4nzvca9cmczlw"
VECTOR_1_SEED = bytes.fromhex("318c6318c6318c6318c6318c6318c631")

VECTOR_2_A = "MS12NAMEA320ZYXWVUTSRQPNMLKJHGFEDCAXRPP870HKKQRM"
VECTOR_2_C = "MS12NAMECACDEFGHJKLMNPQRSTUVWXYZ023FTR2GDZMPY6PN"
VECTOR_2_S = "MS12NAMES6XQGUZTTXKEQNJSJZV4JV3NZ5K3KWGSPHUH6EVW"
VECTOR_2_SEED = bytes.fromhex("d1808e096b35b209ca12132b264662a5")

VECTOR_3_S = "ms13cashsllhdmn9m42vcsamx24zrxgs3qqjzqud4m0d6nln"
VECTOR_3_SHARES = [
    "ms13casha320zyxwvutsrqpnmlkjhgfedca2a8d0zehn8a0t",
    "ms13cashcacdefghjklmnpqrstuvwxyz023949xq35my48dr",
    "ms13cashd0wsedstcdcts64cd7wvy4m90lm28w4ffupqs7rm",
    "ms13casheekgpemxzshcrmqhaydlp6yhms3ws7320xyxsar9",
    "ms13cashf8jh6sdrkpyrsp5ut94pj8ktehhw2hfvyrj48704",
]
VECTOR_3_SEED = bytes.fromhex("ffeeddccbbaa99887766554433221100")

VECTOR_5 = (
    "MS100C8VSM32ZXFGUHPCHTLUPZRY9X8GF2TVDW0S3JN54KHCE6MUA7LQPZYGSFJD6AN074RXVCEML"
    "H8WU3TK925ACDEFGHJKLMNPQRSTUVWXY06FHPV80UNDVARHRAK"
)
VECTOR_5_SEED = bytes.fromhex(
    "dc5423251cb87175ff8110c8531d0952d8d73e1194e95b5f19d6f9df7c01111104c9baecdfea8cccc677fb9ddc8aec5553b86e528bcadfdcc201c17c638c47e9"
)


def _replace(string, pos, char):
    return string[:pos] + char + string[pos + 1:]


def test_unshared_seed():
    print("Testing unshared seed strings...", end=" ")
    assert decode_seed(VECTOR_1) == VECTOR_1_SEED
    assert decode_seed(VECTOR_1.upper()) == VECTOR_1_SEED
    assert recover_seed([VECTOR_1]) == VECTOR_1_SEED

    share = Share.from_string(VECTOR_1)
    assert share.threshold == 0
    assert share.identifier == "test"
    assert share.is_secret
    assert str(share) == VECTOR_1

    # The published string carries nonzero padding bits; a fresh encoding
    # pads with zeros, so it differs in the last payload symbol only
    fresh = encode_seed(VECTOR_1_SEED, "test")
    assert fresh != VECTOR_1
    assert fresh[:-14] == VECTOR_1[:-14]
    assert decode_seed(fresh) == VECTOR_1_SEED
    print("PASS")


def test_known_share_set():
    print("Testing known 2-of-n share set...", end=" ")
    assert recover_seed([VECTOR_2_A, VECTOR_2_C]) == VECTOR_2_SEED
    assert recover_secret_share([VECTOR_2_A, VECTOR_2_C]) == VECTOR_2_S.lower()
    assert recover_secret_share([VECTOR_2_A, VECTOR_2_C], upper=True) == VECTOR_2_S
    assert decode_seed(VECTOR_2_S) == VECTOR_2_SEED

    try:
        decode_seed(VECTOR_2_A)
        raise AssertionError("A share is not the secret")
    except InvalidShareSet:
        pass
    print("PASS")


def test_known_3_of_5_set():
    """Every three of the published shares rebuild the seed and the secret string."""
    print("Testing known 3-of-5 share set...", end=" ")
    for combo in itertools.combinations(VECTOR_3_SHARES, 3):
        assert recover_seed(list(combo)) == VECTOR_3_SEED
        assert recover_secret_share(list(combo)) == VECTOR_3_S
    assert decode_seed(VECTOR_3_S) == VECTOR_3_SEED

    # A share derived from three others is the published one
    a, c, d, e, f = VECTOR_3_SHARES
    assert derive_share([a, c, d], "e") == e
    assert derive_share([c, e, f], "a") == a
    print("PASS")


def test_long_vector():
    print("Testing known 64-byte seed string...", end=" ")
    assert len(VECTOR_5) == 127
    assert decode_seed(VECTOR_5) == VECTOR_5_SEED
    share = Share.from_string(VECTOR_5)
    assert share.threshold == 0
    assert share.identifier == "0c8v"
    assert share.to_string(upper=True) == VECTOR_5
    print("PASS")


def test_secret_string_not_a_share():
    """An "s" string cannot stand in for a share of a K-of-N set."""
    print("Testing secret string in a share set...", end=" ")
    a, c = VECTOR_3_SHARES[:2]
    for shares in ([VECTOR_3_S, a, c], [a, VECTOR_3_S, c]):
        try:
            recover_seed(shares)
            raise AssertionError("Expected InvalidShareSet")
        except InvalidShareSet:
            pass
        try:
            validate_share_set([Share.from_string(s) for s in shares])
            raise AssertionError("Expected InvalidShareSet")
        except InvalidShareSet:
            pass

    forged = Share.from_seed(bytes(16), 3, "cash").to_string()
    try:
        recover_seed([forged, a, c])
        raise AssertionError("Expected InvalidShareSet")
    except InvalidShareSet:
        pass
    print("PASS")


def test_index_q_is_a_share():
    """Symbol 0 ("q") is an ordinary share index."""
    print("Testing share index q...", end=" ")
    seed = bytes(range(16))
    shares = split_seed(seed, 2, "zeta", indices="qp")
    assert Share.from_string(shares[0]).index == "q"
    assert recover_seed(shares) == seed
    assert recover_seed([shares[1], derive_share(shares, "x")]) == seed
    print("PASS")


def test_too_many_default_shares():
    print("Testing share count limit...", end=" ")
    assert len(split_seed(bytes(16), 2, "much", count=31)) == 31
    try:
        split_seed(bytes(16), 2, "much", count=32)
        raise AssertionError("Only 31 share indices exist")
    except InvalidShareSet:
        pass
    print("PASS")


def test_cash_scenario():
    """3-of-5 split; any three shares give the seed back."""
    print("Testing 3-of-5 split and recovery...", end=" ")
    seed = bytes(16)
    shares = split_seed(seed, 3, "cash", indices="acdef")
    assert len(shares) == 5
    for string, index in zip(shares, "acdef"):
        share = Share.from_string(string)
        assert share.threshold == 3
        assert share.identifier == "cash"
        assert share.index == index

    by_index = dict(zip("acdef", shares))
    assert recover_seed([by_index[i] for i in "adf"]) == seed
    assert recover_seed([by_index[i] for i in "cde"]) == seed
    for combo in itertools.combinations(shares, 3):
        assert recover_seed(list(combo)) == seed
    assert recover_seed(shares) == seed

    try:
        recover_seed(shares[:2])
        raise AssertionError("Expected InsufficientShares")
    except InsufficientShares:
        pass
    print("PASS")


def test_split_default_indices():
    print("Testing default share indices...", end=" ")
    seed = bytes(range(32))
    shares = split_seed(seed, 2, "half", count=4)
    assert [Share.from_string(s).index for s in shares] == list("acde")
    assert recover_seed(shares[2:]) == seed
    print("PASS")


def test_long_seed():
    print("Testing 64-byte seed...", end=" ")
    seed = bytes(range(64))
    string = encode_seed(seed, "leet")
    assert len(string) == 127
    assert decode_seed(string) == seed

    shares = split_seed(seed, 2, "leet", count=3)
    assert all(len(s) == 127 for s in shares)
    assert recover_seed(shares[1:]) == seed
    print("PASS")


def test_seed_length_limits():
    print("Testing seed length limits...", end=" ")
    for seed in (bytes(15), bytes(65)):
        try:
            encode_seed(seed, "test")
            raise AssertionError(f"{len(seed)}-byte seed should be rejected")
        except InvalidLength:
            pass
    print("PASS")


def test_derive_share():
    print("Testing derived shares...", end=" ")
    new = derive_share([VECTOR_2_A, VECTOR_2_C], "d")
    share = Share.from_string(new)
    assert share.index == "d"
    assert share.identifier == "name"
    assert recover_seed([VECTOR_2_A, new]) == VECTOR_2_SEED

    try:
        derive_share([VECTOR_2_A, VECTOR_2_C], "a")
        raise AssertionError("Index 'a' is taken")
    except InvalidShareSet:
        pass
    print("PASS")


def test_relabel():
    print("Testing relabel...", end=" ")
    relabelled = relabel([VECTOR_2_A, VECTOR_2_C], "deck")
    assert all(Share.from_string(s).identifier == "deck" for s in relabelled)
    assert recover_seed(relabelled) == VECTOR_2_SEED

    # Relabelled shares no longer combine with the originals
    try:
        recover_seed([relabelled[0], VECTOR_2_C])
        raise AssertionError("Expected InvalidShareSet")
    except InvalidShareSet:
        pass
    print("PASS")


def test_correct_string():
    print("Testing string repair...", end=" ")
    typo = _replace(VECTOR_1, 12, "z")
    try:
        Share.from_string(typo)
        raise AssertionError("Expected ChecksumMismatch")
    except ChecksumMismatch:
        pass

    fixed, correction = correct_string(typo)
    assert fixed == VECTOR_1
    assert correction.describe(offset=3) == ["position 12: Z -> X"]

    # Upper-case input stays upper case
    typo = _replace(_replace(VECTOR_2_A, 20, "Q"), 30, "Q")
    fixed, correction = correct_string(typo)
    assert fixed == VECTOR_2_A
    assert correction.weight == 2
    print("PASS")


def test_correct_string_too_many_errors():
    print("Testing repair beyond the radius...", end=" ")
    typo = VECTOR_1
    for pos in range(9, 18):
        typo = _replace(typo, pos, "q")
    try:
        fixed, correction = correct_string(typo)
        # Nine errors may decode to some other string, never the original
        assert fixed != VECTOR_1
        assert correction.weight <= 4
    except Uncorrectable:
        pass
    print("PASS")


def test_string_format_errors():
    print("Testing malformed strings...", end=" ")
    bad = [
        "Ms10testsxxxxxxxxxxxxxxxxxxxxxxxxxx4nzvca9cmczlw",   # mixed case
        "ms10testsxxxxxxxxxxxxxxxxxxxxxxxxxx4nzvca9cmczlb",   # 'b' not in alphabet
        "bc10testsxxxxxxxxxxxxxxxxxxxxxxxxxx4nzvca9cmczlw",   # wrong HRP
        "ms0testsxxxxxxxxxxxxxxxxxxxxxxxxxx4nzvca9cmczlw",    # no separator
    ]
    for string in bad:
        try:
            Share.from_string(string)
            raise AssertionError(f"{string} should be rejected")
        except CharsetError:
            pass

    try:
        Share.from_string(VECTOR_1[:-2])
        raise AssertionError("Truncated string should be rejected")
    except (InvalidLength, ChecksumMismatch):
        pass
    print("PASS")


def test_validate_share_set():
    print("Testing share set validation...", end=" ")
    a = Share.from_string(VECTOR_2_A)
    c = Share.from_string(VECTOR_2_C)
    assert validate_share_set([a, c]) == 2

    cases = [
        [a, a],                                          # same index twice
        [a, Share(3, "name", "c", c.payload)],           # threshold differs
        [a, Share(2, "deck", "c", c.payload)],           # identifier differs
        [Share.from_string(VECTOR_1)] * 2,               # unshared secret twice
    ]
    for shares in cases:
        try:
            validate_share_set(shares)
            raise AssertionError("Expected InvalidShareSet")
        except InvalidShareSet:
            pass

    try:
        validate_share_set([])
        raise AssertionError("Expected InsufficientShares")
    except InsufficientShares:
        pass

    try:
        split_seed(bytes(16), 1, "test")
        raise AssertionError("Threshold 1 cannot be split")
    except InvalidShareSet:
        pass
    print("PASS")


def test_deterministic_share_set():
    print("Testing deterministic share sets...", end=" ")
    seed = bytes.fromhex("ffeeddccbbaa99887766554433221100")
    first = derive_share_set(seed, 3, "cash", 5, unique_string="2024-01-01")
    again = derive_share_set(seed, 3, "cash", 5, unique_string="2024-01-01")
    other = derive_share_set(seed, 3, "cash", 5, unique_string="2024-01-02")

    assert first == again
    assert first != other
    assert len(first) == 5
    assert all(not Share.from_string(s).is_secret for s in first)
    for combo in itertools.combinations(first, 3):
        assert recover_seed(list(combo)) == seed
    assert recover_seed(other[2:]) == seed

    try:
        derive_share_set(seed, 3, "cash", 2)
        raise AssertionError("Count below threshold should be rejected")
    except InvalidShareSet:
        pass
    print("PASS")


def test_chacha20_stream():
    print("Testing ChaCha20 keystream...", end=" ")
    key = bytes(range(32))
    whole = ChaCha20Stream(key)(64)
    pieces = ChaCha20Stream(key)
    assert pieces(10) + pieces(54) == whole
    assert pieces.bytes_used == 64

    order = shuffle_indices(ChaCha20Stream(key))
    assert len(order) == 31
    assert "s" not in order
    assert order == shuffle_indices(ChaCha20Stream(key))

    try:
        ChaCha20Stream(bytes(16))
        raise AssertionError("Short key should be rejected")
    except ValueError:
        pass
    print("PASS")


def main():
    print("=" * 50)
    print("  codex32 Integration Tests")
    print("=" * 50)
    print()

    tests = [
        test_unshared_seed,
        test_known_share_set,
        test_known_3_of_5_set,
        test_long_vector,
        test_secret_string_not_a_share,
        test_index_q_is_a_share,
        test_too_many_default_shares,
        test_cash_scenario,
        test_split_default_indices,
        test_long_seed,
        test_seed_length_limits,
        test_derive_share,
        test_relabel,
        test_correct_string,
        test_correct_string_too_many_errors,
        test_string_format_errors,
        test_validate_share_set,
        test_deterministic_share_set,
        test_chacha20_stream,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"FAIL: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print()
    print(f"Results: {passed} passed, {failed} failed")
    return failed == 0


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
