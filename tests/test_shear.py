"""
Pytest unit tests for kmershear.shear.
"""

import pytest

from conftest import GOLDEN_EDGES, GOLDEN_FLAGS
from kmershear.exceptions import InvalidInputError
from kmershear.sequence import ComplementPolicy
from kmershear.shear import (
    classify_branches,
    format_branch_table,
    format_edges,
    pad_sequence,
    shear,
    sliding_windows,
)


# --- Padding and windows ---


def test_pad_sequence_adds_k_minus_one_leading_and_one_trailing_sentinel():
    assert pad_sequence("ACG", 4) == "$$$ACG$"
    assert pad_sequence("ACG", 2, "#") == "#ACG#"


def test_sliding_windows_are_deduplicated():
    padded = pad_sequence("TACGACGTCGACT", 4)
    windows = sliding_windows(padded, 4)
    # 14 windows, "CGAC" occurs twice
    assert len(windows) == 13
    assert {"$$$T", "$$TA", "ACT$"} <= windows


# --- Golden fixture ---


def test_shear_golden_fixture(golden_sequence: str):
    assert shear(golden_sequence, 4, "$") == GOLDEN_EDGES


def test_golden_fixture_contains_reverse_complement_windows(golden_sequence: str):
    edges = set(shear(golden_sequence))
    # windows of "$$$AGTCGACGTCGTA$"
    for window in ("$$$A", "$$AG", "$AGT", "AGTC", "TCGT", "CGTA", "GTA$"):
        assert (window[:-1], window[-1]) in edges


def test_classify_branches_golden_fixture(golden_sequence: str):
    assert classify_branches(shear(golden_sequence)) == GOLDEN_FLAGS


def test_format_edges_and_branch_table():
    edges = GOLDEN_EDGES[:3]
    assert format_edges(edges) == ["$$$\tA", "$$$\tT", "$$A\tG"]
    assert format_branch_table(edges, [0, 1, 1]) == [
        "0\t$$$\tA",
        "1\t$$$\tT",
        "1\t$$A\tG",
    ]


# --- Properties ---


@pytest.mark.parametrize(
    "sequence, k",
    [
        ("TACGACGTCGACT", 4),
        ("A", 2),
        ("GATTACA", 3),
        ("AAAAAAAA", 5),
        ("ACGTACGTAC", 10),
        ("GGCAGATTCCCCCTAGACCCGCCCGCACCATGG", 7),
    ],
)
class TestShearProperties:
    def test_no_duplicate_edges(self, sequence: str, k: int):
        edges = shear(sequence, k)
        assert len(edges) == len(set(edges))

    def test_every_symbol_is_a_next_symbol(self, sequence: str, k: int):
        next_symbols = {next_symbol for _, next_symbol in shear(sequence, k)}
        assert set(sequence) <= next_symbols

    def test_context_and_next_symbol_widths(self, sequence: str, k: int):
        for context, next_symbol in shear(sequence, k):
            assert len(context) == k - 1
            assert len(next_symbol) == 1

    def test_sorted_by_reversed_context(self, sequence: str, k: int):
        keys = [(context[::-1], next_symbol) for context, next_symbol in shear(sequence, k)]
        assert keys == sorted(keys)

    def test_case_normalized_input_gives_same_edges(self, sequence: str, k: int):
        assert shear(sequence.lower(), k) == shear(sequence, k)

    def test_deterministic(self, sequence: str, k: int):
        assert shear(sequence, k) == shear(sequence, k)

    def test_one_flag_per_edge_and_last_is_one(self, sequence: str, k: int):
        edges = shear(sequence, k)
        flags = classify_branches(edges)
        assert len(flags) == len(edges)
        assert flags[-1] == 1


def test_shear_is_strand_symmetric():
    assert shear("TACGACGTCGACT") == shear("AGTCGACGTCGTA")


def test_custom_sentinel():
    edges = shear("AC", k=2, sentinel="#")
    assert edges[:2] == [("#", "A"), ("#", "G")]


# --- Boundaries and errors ---


def test_sequence_shorter_than_k_still_produces_windows():
    edges = shear("A", k=6)
    # padded "$$$$$A$" -> 2 windows per strand
    assert edges == [("$$$$$", "A"), ("$$$$$", "T"), ("$$$$A", "$"), ("$$$$T", "$")]


def test_empty_sequence_raises_invalid_input():
    with pytest.raises(InvalidInputError, match="smaller than the padded sequence"):
        shear("", k=4)


@pytest.mark.parametrize("k", [0, 1, -3])
def test_k_below_two_raises(k: int):
    with pytest.raises(InvalidInputError, match="at least 2"):
        shear("ACGT", k=k)


def test_non_integer_k_raises():
    with pytest.raises(InvalidInputError, match="must be an integer"):
        shear("ACGT", k=4.0)  # type: ignore[arg-type]


@pytest.mark.parametrize("sentinel", ["", "$$", "A", "t"])
def test_invalid_sentinel_raises(sentinel: str):
    with pytest.raises(InvalidInputError, match="Sentinel"):
        shear("ACGT", sentinel=sentinel)


def test_sentinel_inside_sequence_raises():
    with pytest.raises(InvalidInputError, match="must not contain the sentinel"):
        shear("AC$GT")


def test_strict_policy_rejects_unknown_symbols():
    with pytest.raises(InvalidInputError) as excinfo:
        shear("ACNGT")
    assert excinfo.value.details == {"symbols": "N"}
    assert isinstance(excinfo.value, ValueError)


def test_passthrough_policy_keeps_unknown_symbols():
    edges = shear("ANT", k=2, policy=ComplementPolicy.PASSTHROUGH)
    # reverse complement of ANT is ANT itself under pass-through
    assert edges == shear("ANT", k=2, policy="passthrough")
    assert ("A", "N") in edges
    assert ("N", "T") in edges


def test_classify_branches_empty():
    assert classify_branches([]) == []


def test_classify_branches_single_edge():
    assert classify_branches([("AC", "G")]) == [1]
