"""
Nucleotide alphabet, complement mapping and the GenomicSequence value type.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, Set

import mmh3

from .exceptions import InvalidInputError


class Nucleotide(str, enum.Enum):
    """The four DNA bases, in 2-bit code order."""

    A = "A"
    C = "C"
    G = "G"
    T = "T"

    @property
    def complement(self) -> "Nucleotide":
        return Nucleotide(COMPLEMENT_MAP[self.value])


class ComplementPolicy(str, enum.Enum):
    """What to do with symbols that have no defined complement."""

    STRICT = "strict"
    PASSTHROUGH = "passthrough"


# Fixed pairing A<->T, C<->G. Never mutated.
COMPLEMENT_MAP: Dict[str, str] = {"A": "T", "C": "G", "G": "C", "T": "A"}
VALID_NUCLEOTIDES: frozenset = frozenset(base.value for base in Nucleotide)
DEFAULT_SENTINEL = "$"


def normalize_sequence(sequence: str) -> str:
    """Return the uppercase canonical form of ``sequence``."""
    if not isinstance(sequence, str):
        raise TypeError(f"Sequence must be str, got {type(sequence).__name__}.")
    return sequence.strip().upper()


def invalid_symbols(sequence: str) -> Set[str]:
    """Symbols of an (already normalised) sequence outside {A, C, G, T}."""
    return set(sequence) - VALID_NUCLEOTIDES


def complement(
    sequence: str, policy: ComplementPolicy = ComplementPolicy.STRICT
) -> str:
    """
    Complement each symbol of ``sequence`` (after uppercase normalisation).

    Args:
        sequence: DNA sequence string, any case.
        policy: STRICT raises on symbols with no complement, PASSTHROUGH
            leaves them unchanged.

    Returns:
        The complemented sequence, same length and order as the input.

    Raises:
        InvalidInputError: If ``policy`` is STRICT and an unknown symbol is found.

    Example:
        >>> complement("ACGT")
        'TGCA'
        >>> complement("AXG", ComplementPolicy.PASSTHROUGH)
        'TXC'
    """
    normalized = normalize_sequence(sequence)
    if ComplementPolicy(policy) is ComplementPolicy.STRICT:
        bad = invalid_symbols(normalized)
        if bad:
            raise InvalidInputError(
                "Sequence contains symbols with no complement",
                details={"symbols": "".join(sorted(bad))},
            )
    return "".join(COMPLEMENT_MAP.get(base, base) for base in normalized)


def reverse_complement(
    sequence: str, policy: ComplementPolicy = ComplementPolicy.STRICT
) -> str:
    """
    Generate reverse complement of a DNA sequence.

    Example:
        >>> reverse_complement("TACGACGTCGACT")
        'AGTCGACGTCGTA'
    """
    return complement(sequence, policy)[::-1]


def is_forward_canonical(sequence: str) -> bool:
    """
    True if the sequence sorts strictly before its reverse complement.

    Unknown symbols are passed through unchanged, so any line of text can be
    compared. Palindromic sequences (equal to their reverse complement)
    return False.
    """
    normalized = normalize_sequence(sequence)
    return normalized < reverse_complement(normalized, ComplementPolicy.PASSTHROUGH)


def canonical_kmer(kmer: str) -> str:
    """Computes the canonical representation of a k-mer.

    The canonical k-mer is the lexicographically smaller of the k-mer
    and its reverse complement, so strand orientation does not affect
    k-mer identity.
    """
    normalized = normalize_sequence(kmer)
    reverse_complement_kmer = reverse_complement(normalized)
    return min(normalized, reverse_complement_kmer)


@dataclass(order=True, slots=True, frozen=True)
class GenomicSequence:
    """
    Immutable, validated DNA sequence with an identifier.

    ``sequence_data`` is normalised to uppercase on construction. Under the
    default STRICT policy it must contain only A, C, G and T; PASSTHROUGH
    keeps other symbols and complements them to themselves.

    Attributes:
        sequence_id: Identifier for the sequence (not part of equality).
        sequence_data: Uppercase nucleotide string.
        policy: How symbols without a complement are treated (not part of
            equality).

    Example:
        >>> seq = GenomicSequence(sequence_id='read_001', sequence_data='acgt')
        >>> str(seq)
        'ACGT'
        >>> seq[0]
        'A'
    """

    sequence_id: str = field(compare=False)
    sequence_data: str
    policy: ComplementPolicy = field(default=ComplementPolicy.STRICT, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.sequence_data, str):
            raise TypeError(
                f"Sequence data must be str, got {type(self.sequence_data).__name__}."
            )
        normalized = normalize_sequence(self.sequence_data)
        if not normalized:
            raise InvalidInputError(
                "Sequence data must be non-empty.",
                details={"sequence_id": self.sequence_id},
            )
        object.__setattr__(self, "policy", ComplementPolicy(self.policy))
        bad = invalid_symbols(normalized)
        if bad and self.policy is ComplementPolicy.STRICT:
            raise InvalidInputError(
                "Sequence contains invalid DNA symbols",
                details={
                    "sequence_id": self.sequence_id,
                    "symbols": "".join(sorted(bad)),
                },
            )
        # frozen dataclass: bypass __setattr__ to store the normalised form
        object.__setattr__(self, "sequence_data", normalized)

    def __hash__(self) -> int:
        """Hash the nucleotide string with MurmurHash3."""
        return mmh3.hash(self.sequence_data)

    def __len__(self) -> int:
        return len(self.sequence_data)

    def __getitem__(self, index: int) -> str:
        return self.sequence_data[index]

    def __str__(self) -> str:
        return self.sequence_data

    def reverse_complement(self) -> "GenomicSequence":
        """Return a new GenomicSequence holding the reverse complement."""
        return GenomicSequence(
            sequence_id=self.sequence_id,
            sequence_data=reverse_complement(self.sequence_data, self.policy),
            policy=self.policy,
        )
