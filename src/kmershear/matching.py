"""
Scan bit-packed pattern lines against a reference sequence.

Each line is decoded twice, once with the forward base code and once with
the complement code. A decoded pattern counts as present when it occurs in
the reference read left to right or right to left.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from .encoding import BASES, COMPLEMENT_BASES, DEFAULT_PATTERN_LENGTH, decode_bit_pattern
from .exceptions import InvalidInputError
from .genomic_types import KmerString
from .sequence import normalize_sequence

logger = logging.getLogger(__name__)


class Orientation(str, enum.Enum):
    FORWARD = "fwd"
    REVERSE = "rev"


@dataclass(frozen=True)
class PatternMatch:
    """A decoded pattern and the strand it was found on, if any."""

    sequence: KmerString
    orientation: Optional[Orientation] = None

    @property
    def found(self) -> bool:
        return self.orientation is not None

    def format(self) -> str:
        if self.orientation is None:
            return self.sequence
        return f"{self.sequence} - {self.orientation.value}"


class ReferenceScanner:
    """
    Locates decoded patterns in a fixed reference sequence.

    Args:
        reference: Reference sequence; whitespace is removed and case folded.
        pattern_length: Number of bases per pattern (two bits each).
    """

    def __init__(
        self, reference: str, pattern_length: int = DEFAULT_PATTERN_LENGTH
    ) -> None:
        self.reference: str = normalize_sequence("".join(reference.split()))
        if not self.reference:
            raise InvalidInputError("Reference sequence must be non-empty.")
        self._reversed_reference: str = self.reference[::-1]
        self.pattern_length: int = pattern_length

    def _occurs(self, pattern: str) -> bool:
        return pattern in self.reference or pattern in self._reversed_reference

    def scan_line(self, line: str) -> PatternMatch:
        forward = decode_bit_pattern(line, self.pattern_length, BASES)
        if self._occurs(forward):
            return PatternMatch(forward, Orientation.FORWARD)

        complemented = decode_bit_pattern(line, self.pattern_length, COMPLEMENT_BASES)
        if self._occurs(complemented):
            return PatternMatch(complemented[::-1], Orientation.REVERSE)

        return PatternMatch(forward)

    def scan(self, lines: Iterable[str]) -> Iterator[PatternMatch]:
        """Yield one match per non-blank line."""
        scanned = 0
        hits = 0
        for line in lines:
            if not line.strip():
                continue
            match = self.scan_line(line)
            scanned += 1
            hits += match.found
            yield match
        logger.info(f"Scanned {scanned} patterns, {hits} found in reference")
