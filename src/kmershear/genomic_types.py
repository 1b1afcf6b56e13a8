"""
Type definitions for the kmershear package.

This module centralizes common type aliases used throughout kmershear
to ensure consistency and improve code readability.
"""

from typing import List, Tuple

# Type aliases for clarity
KmerString = str  # A k-mer as an uppercase Python string.
Context = str  # All symbols of a window except the last.
NextSymbol = str  # The last symbol of a window.
Edge = Tuple[Context, NextSymbol]  # A window split into (context, next-symbol).
EdgeList = List[Edge]  # Edges in sorted order as produced by shear().
BranchFlag = int  # 0 = same context as the following edge, 1 = branch point.
EncodedKmer = int  # A k-mer packed 2 bits per base, first base most significant.
