"""
2-bit k-mer encoding and decoding of bit-packed pattern text.

Bases are coded A=0, C=1, G=2, T=3, with the first base of a k-mer in the
most significant position. The same code is used by cortex binaries.
"""

from typing import Sequence

from .exceptions import InvalidInputError
from .genomic_types import EncodedKmer, KmerString
from .sequence import Nucleotide

BASES: str = "".join(base.value for base in Nucleotide)  # "ACGT"
COMPLEMENT_BASES: str = "".join(base.complement.value for base in Nucleotide)  # "TGCA"
BASE_CODES = {base: code for code, base in enumerate(BASES)}
DEFAULT_PATTERN_LENGTH = 21


def encode_kmer(kmer: str) -> EncodedKmer:
    """
    Pack a k-mer into an integer, 2 bits per base.

    Example:
        >>> encode_kmer("acgt")
        27
    """
    value = 0
    for position, base in enumerate(kmer.upper(), start=1):
        code = BASE_CODES.get(base)
        if code is None:
            raise InvalidInputError(
                "Sequence is not a valid DNA sequence",
                details={"position": position, "symbol": base},
            )
        value = (value << 2) | code
    return value


def decode_kmer(value: EncodedKmer, k: int) -> KmerString:
    """
    Unpack an integer produced by :func:`encode_kmer` into k bases.

    Example:
        >>> decode_kmer(27, 4)
        'ACGT'
    """
    if k < 0:
        raise InvalidInputError("K-mer length must not be negative", details={"k": k})
    if value < 0 or value >> (2 * k):
        raise InvalidInputError(
            "Encoded k-mer does not fit in the requested length",
            details={"value": value, "k": k},
        )
    return "".join(BASES[(value >> (2 * shift)) & 3] for shift in range(k - 1, -1, -1))


def decode_bit_pattern(
    line: str,
    length: int = DEFAULT_PATTERN_LENGTH,
    alphabet: Sequence[str] = BASES,
) -> KmerString:
    """
    Decode the trailing ``2 * length`` binary digits of a text line.

    Each pair of '0'/'1' characters is read as a number 0..3 and mapped
    through ``alphabet``; leading characters beyond the pattern are ignored.

    Example:
        >>> decode_bit_pattern("xx00011011", length=4)
        'ACGT'
        >>> decode_bit_pattern("00011011", length=4, alphabet=COMPLEMENT_BASES)
        'TGCA'
    """
    if length <= 0:
        raise InvalidInputError(
            "Pattern length must be positive", details={"length": length}
        )
    if len(alphabet) != 4:
        raise InvalidInputError(
            "Alphabet must have exactly four symbols",
            details={"alphabet": "".join(alphabet)},
        )
    bits = line.strip()
    width = 2 * length
    if len(bits) < width:
        raise InvalidInputError(
            "Line is too short for the pattern length",
            details={"required": width, "found": len(bits)},
        )
    bits = bits[-width:]
    if set(bits) - {"0", "1"}:
        raise InvalidInputError(
            "Pattern must contain only binary digits", details={"pattern": bits}
        )
    return "".join(alphabet[int(bits[i : i + 2], 2)] for i in range(0, width, 2))
