"""
K-mer shearing: overlapping windows of a sequence and its reverse complement.

``shear`` pads a sequence with sentinel symbols, collects every width-k
window of it and of its reverse complement, deduplicates them and splits
each window into a (context, next-symbol) edge. Edges are sorted by their
reversed context so that edges sharing a suffix end up adjacent, which is
the order a de Bruijn/BOSS style graph builder consumes.
"""

import logging
from typing import Iterable, List, Set

from .exceptions import InvalidInputError
from .genomic_types import BranchFlag, Edge, EdgeList
from .sequence import (
    DEFAULT_SENTINEL,
    VALID_NUCLEOTIDES,
    ComplementPolicy,
    normalize_sequence,
    reverse_complement,
)

logger = logging.getLogger(__name__)

DEFAULT_KMER_LENGTH = 4
MIN_KMER_LENGTH = 2


def validate_sentinel(sentinel: str) -> str:
    """Ensure the sentinel is a single character outside the nucleotide alphabet."""
    if not isinstance(sentinel, str) or len(sentinel) != 1:
        raise InvalidInputError(
            "Sentinel must be a single character", details={"sentinel": sentinel}
        )
    if sentinel.upper() in VALID_NUCLEOTIDES:
        raise InvalidInputError(
            "Sentinel must not be a nucleotide symbol", details={"sentinel": sentinel}
        )
    return sentinel


def pad_sequence(sequence: str, k: int, sentinel: str = DEFAULT_SENTINEL) -> str:
    """Prefix ``k - 1`` sentinels and append one."""
    return sentinel * (k - 1) + sequence + sentinel


def sliding_windows(padded: str, k: int) -> Set[str]:
    """All distinct width-k substrings of ``padded``, one step at a time."""
    return {padded[i : i + k] for i in range(len(padded) - k + 1)}


def _edge_sort_key(edge: Edge):
    context, next_symbol = edge
    return context[::-1], next_symbol


def shear(
    sequence: str,
    k: int = DEFAULT_KMER_LENGTH,
    sentinel: str = DEFAULT_SENTINEL,
    policy: ComplementPolicy = ComplementPolicy.STRICT,
) -> EdgeList:
    """
    Shear a sequence and its reverse complement into sorted, distinct edges.

    Args:
        sequence: DNA sequence, any case. Normalised to uppercase.
        k: Window width, at least 2.
        sentinel: Single padding character outside {A, C, G, T}.
        policy: How the reverse complement treats unknown symbols. With
            PASSTHROUGH the symbol is kept as-is in both strands.

    Returns:
        List of (context, next_symbol) pairs with no duplicates, ordered by
        the reversed context and then by next_symbol.

    Raises:
        InvalidInputError: If k is below 2 or not smaller than the padded
            length, if the sentinel is invalid or occurs in the sequence, or
            if STRICT policy meets a symbol with no complement.

    Example:
        >>> shear("AC", k=2)[:3]
        [('$', 'A'), ('$', 'G'), ('A', 'C')]
    """
    validate_sentinel(sentinel)
    if not isinstance(k, int) or isinstance(k, bool):
        raise InvalidInputError(
            "K-mer length must be an integer", details={"k": repr(k)}
        )
    if k < MIN_KMER_LENGTH:
        raise InvalidInputError(
            f"K-mer length must be at least {MIN_KMER_LENGTH}", details={"k": k}
        )

    normalized = normalize_sequence(sequence)
    if sentinel in normalized:
        raise InvalidInputError(
            "Sequence must not contain the sentinel", details={"sentinel": sentinel}
        )

    forward = pad_sequence(normalized, k, sentinel)
    if k >= len(forward):
        raise InvalidInputError(
            "K-mer length must be smaller than the padded sequence",
            details={"k": k, "padded_length": len(forward)},
        )
    reverse = pad_sequence(reverse_complement(normalized, policy), k, sentinel)

    windows = sliding_windows(forward, k) | sliding_windows(reverse, k)
    edges = sorted(
        ((window[:-1], window[-1]) for window in windows), key=_edge_sort_key
    )
    logger.debug(
        f"Sheared sequence of length {len(normalized)} with k={k} into {len(edges)} edges"
    )
    return edges


def classify_branches(edges: Iterable[Edge]) -> List[BranchFlag]:
    """
    Flag each edge 0 if the next edge has the same context, else 1.

    The last edge is always flagged 1. An empty edge list gives no flags.
    """
    edge_list = list(edges)
    flags: List[BranchFlag] = [
        0 if first[0] == second[0] else 1
        for first, second in zip(edge_list, edge_list[1:])
    ]
    if edge_list:
        flags.append(1)
    return flags


def format_edges(edges: Iterable[Edge]) -> List[str]:
    """Render edges as ``context<TAB>next_symbol`` lines."""
    return [f"{context}\t{next_symbol}" for context, next_symbol in edges]


def format_branch_table(
    edges: Iterable[Edge], flags: Iterable[BranchFlag]
) -> List[str]:
    """Render ``flag<TAB>context<TAB>next_symbol`` lines."""
    return [
        f"{flag}\t{context}\t{next_symbol}"
        for (context, next_symbol), flag in zip(edges, flags)
    ]
