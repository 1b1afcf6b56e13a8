"""
kmershear: k-mer shearing and small DNA sequence utilities.

This package shears sequences and their reverse complements into sorted
(context, next-symbol) edges for de Bruijn style graph construction, and
provides the supporting pieces: complement handling, 2-bit k-mer encoding,
bit-packed pattern scanning against a reference and a cortex binary reader.
"""

__version__ = "0.1.0"

from .cortex import CortexBinary, CortexKmer
from .exceptions import CortexFormatError, InvalidInputError, KmerShearException
from .matching import PatternMatch, ReferenceScanner
from .sequence import (
    ComplementPolicy,
    GenomicSequence,
    Nucleotide,
    complement,
    is_forward_canonical,
    reverse_complement,
)
from .shear import classify_branches, shear
from .running import main

__all__ = [
    "CortexBinary",
    "CortexKmer",
    "CortexFormatError",
    "InvalidInputError",
    "KmerShearException",
    "PatternMatch",
    "ReferenceScanner",
    "ComplementPolicy",
    "GenomicSequence",
    "Nucleotide",
    "complement",
    "is_forward_canonical",
    "reverse_complement",
    "classify_branches",
    "shear",
    "main",
    "__version__",
]
