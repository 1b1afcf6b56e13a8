"""
Reader for cortex_var binary graph files.

A cortex binary is a little-endian header framed by two "CORTEX" magic
strings, followed by fixed-size k-mer records. Each record holds the k-mer
packed 2 bits per base over ``words_per_kmer`` 64-bit words, one 32-bit
coverage per colour and one edge byte per colour. Records are read in
chunks with a NumPy structured dtype.
"""

import io
import logging
import pathlib
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, List, Optional, Tuple, Union

import numpy as np

from .encoding import decode_kmer
from .exceptions import CortexFormatError
from .genomic_types import EncodedKmer, KmerString

logger = logging.getLogger(__name__)

MAGIC = b"CORTEX"
MAX_NAME_LENGTH = 10000
ERROR_RATE_BYTES = 16
# smallest possible per-colour header block: read length, sequence length,
# empty name, error rate, four flags, two thresholds, empty graph name
MIN_COLOUR_HEADER_BYTES = 4 + 8 + 4 + ERROR_RATE_BYTES + 4 + 4 + 4 + 4
DEFAULT_CHUNK_RECORDS = 65536

# Edge byte layout: low nibble = outgoing bases T, G, C, A (bit 0..3),
# high nibble = incoming bases A, C, G, T (bit 4..7).
OUTGOING_BASES: Tuple[int, ...] = (3, 2, 1, 0)
INCOMING_BASES: Tuple[int, ...] = (0, 1, 2, 3)


@dataclass
class Colour:
    """Per-colour metadata from the cortex header."""

    name: str = ""
    mean_read_length: int = 0
    total_sequence_length: int = 0
    error_rate: bytes = b""
    top_clipping_performed: bool = False
    low_cov_supernodes_removed: bool = False
    low_cov_kmers_removed: bool = False
    cleaned_against_graph: bool = False
    low_cov_supernodes_threshold: int = 0
    low_cov_kmers_threshold: int = 0
    cleaning_graph_name: str = ""


@dataclass
class CortexHeader:
    version: int
    kmer_size: int
    words_per_kmer: int
    colour_count: int
    colours: List[Colour] = field(default_factory=list)

    def describe(self) -> str:
        return (
            f"Magic chars:       {MAGIC.decode('ascii')}\n"
            f"Version:           {self.version}\n"
            f"KmerSize:          {self.kmer_size}\n"
            f"Words per kmer:    {self.words_per_kmer}\n"
            f"Number of colours: {self.colour_count}\n"
        )


@dataclass(frozen=True)
class CortexKmer:
    """One k-mer record: packed bases, per-colour coverages and edges."""

    kmer: EncodedKmer
    coverages: Tuple[int, ...]
    edges: Tuple[int, ...]

    def nucleotides(self, k: int) -> KmerString:
        # bits above the k-th base are ignored
        return decode_kmer(self.kmer & ((1 << (2 * k)) - 1), k)

    def reversed_nucleotides(self, k: int) -> KmerString:
        return self.nucleotides(k)[::-1]

    def all_edges(self) -> int:
        """Union of the edge bits over every colour."""
        combined = 0
        for edge_byte in self.edges:
            combined |= edge_byte
        return combined

    def right_kmers(self, k: int) -> List[EncodedKmer]:
        """K-mers reached by following outgoing edges."""
        mask = (1 << (2 * k)) - 1
        shifted = (self.kmer << 2) & mask
        edges = self.all_edges()
        return [
            shifted | base
            for bit, base in enumerate(OUTGOING_BASES)
            if (edges >> bit) & 1
        ]

    def left_kmers(self, k: int) -> List[EncodedKmer]:
        """K-mers reached by following incoming edges."""
        shifted = self.kmer >> 2
        edges = self.all_edges()
        return [
            shifted | (base << (2 * (k - 1)))
            for bit, base in enumerate(INCOMING_BASES)
            if (edges >> (bit + 4)) & 1
        ]


class _HeaderReader:
    """Reads little-endian header fields, treating a short read as corruption."""

    def __init__(self, handle: BinaryIO) -> None:
        self.handle = handle

    def remaining(self) -> int:
        position = self.handle.tell()
        end = self.handle.seek(0, io.SEEK_END)
        self.handle.seek(position)
        return end - position

    def read_bytes(self, size: int) -> bytes:
        data = self.handle.read(size)
        if len(data) != size:
            raise CortexFormatError(
                "Cortex file ends inside the header",
                details={"expected": size, "found": len(data)},
            )
        return data

    def read(self, fmt: str) -> Tuple:
        return struct.unpack("<" + fmt, self.read_bytes(struct.calcsize("<" + fmt)))

    def read_uint32(self) -> int:
        return self.read("I")[0]

    def read_uint64(self) -> int:
        return self.read("Q")[0]

    def read_flag(self) -> bool:
        return self.read("B")[0] == 0x1

    def read_name(self) -> str:
        length = self.read_uint32()
        if length > MAX_NAME_LENGTH:
            raise CortexFormatError(
                "Cortex file does not have the correct format",
                details={"name_length": length},
            )
        # zero bytes are padding
        return self.read_bytes(length).replace(b"\x00", b"").decode("ascii", "replace")

    def expect_magic(self) -> None:
        if self.handle.read(len(MAGIC)) != MAGIC:
            raise CortexFormatError("Cortex file does not have correct format")


def read_header(handle: BinaryIO) -> CortexHeader:
    """Parse a cortex header, leaving ``handle`` at the first k-mer record."""
    reader = _HeaderReader(handle)
    reader.expect_magic()
    version, kmer_size, words_per_kmer, colour_count = reader.read("4I")
    if colour_count * MIN_COLOUR_HEADER_BYTES + len(MAGIC) > reader.remaining():
        raise CortexFormatError(
            "Cortex header declares more colours than the file can hold",
            details={"colour_count": colour_count},
        )
    header = CortexHeader(
        version=version,
        kmer_size=kmer_size,
        words_per_kmer=words_per_kmer,
        colour_count=colour_count,
        colours=[Colour() for _ in range(colour_count)],
    )

    for colour in header.colours:
        colour.mean_read_length = reader.read_uint32()
    for colour in header.colours:
        colour.total_sequence_length = reader.read_uint64()
    for colour in header.colours:
        colour.name = reader.read_name()
    for colour in header.colours:
        colour.error_rate = reader.read_bytes(ERROR_RATE_BYTES)
    for colour in header.colours:
        colour.top_clipping_performed = reader.read_flag()
        colour.low_cov_supernodes_removed = reader.read_flag()
        colour.low_cov_kmers_removed = reader.read_flag()
        colour.cleaned_against_graph = reader.read_flag()
        colour.low_cov_supernodes_threshold = reader.read_uint32()
        colour.low_cov_kmers_threshold = reader.read_uint32()
        colour.cleaning_graph_name = reader.read_name()

    reader.expect_magic()
    return header


def record_dtype(words_per_kmer: int, colour_count: int) -> np.dtype:
    """Packed structured dtype of one k-mer record."""
    return np.dtype(
        [
            ("kmer", "<u8", (words_per_kmer,)),
            ("coverages", "<u4", (colour_count,)),
            ("edges", "u1", (colour_count,)),
        ]
    )


def _combine_words(words: np.ndarray) -> EncodedKmer:
    value = 0
    for index, word in enumerate(words):
        value |= int(word) << (64 * index)
    return value


class CortexBinary:
    """
    An open cortex_var binary file.

    Use :meth:`open` (or the class as a context manager) to parse the header;
    k-mer records are then streamed with :meth:`iter_kmers`.

    Example:
        >>> with CortexBinary.open("graph.ctx") as graph:  # doctest: +SKIP
        ...     for record in graph.iter_kmers():
        ...         print(record.nucleotides(graph.kmer_size))
    """

    def __init__(self, path: pathlib.Path, handle: BinaryIO, header: CortexHeader) -> None:
        self.path = path
        self._handle: Optional[BinaryIO] = handle
        self.header = header
        self.kmer_start_offset: int = handle.tell()
        if header.kmer_size < 1:
            raise CortexFormatError(
                "Cortex header declares a zero k-mer size",
                details={"kmer_size": header.kmer_size},
            )
        if header.words_per_kmer < 1:
            raise CortexFormatError(
                "Cortex header declares no words per k-mer",
                details={"words_per_kmer": header.words_per_kmer},
            )
        self.dtype = record_dtype(header.words_per_kmer, header.colour_count)

        payload = self.path.stat().st_size - self.kmer_start_offset
        if payload % self.dtype.itemsize:
            raise CortexFormatError(
                "Cortex file ends with a partial k-mer record",
                details={"record_size": self.dtype.itemsize, "payload": payload},
            )
        self.kmer_count: int = payload // self.dtype.itemsize

    @classmethod
    def open(cls, path: Union[str, pathlib.Path]) -> "CortexBinary":
        path = pathlib.Path(path)
        handle = path.open("rb")
        try:
            header = read_header(handle)
            binary = cls(path, handle, header)
        except Exception:
            handle.close()
            raise
        logger.info(
            f"Opened cortex binary {path}: k={header.kmer_size}, "
            f"{header.colour_count} colours, {binary.kmer_count} k-mers"
        )
        return binary

    @property
    def kmer_size(self) -> int:
        return self.header.kmer_size

    @property
    def colours(self) -> List[Colour]:
        return self.header.colours

    def describe(self) -> str:
        return self.header.describe()

    def iter_records(self, chunk_records: int = DEFAULT_CHUNK_RECORDS) -> Iterator[np.ndarray]:
        """Yield structured arrays of up to ``chunk_records`` records."""
        if self._handle is None:
            raise ValueError("I/O operation on closed cortex binary.")
        self._handle.seek(self.kmer_start_offset)
        chunk_bytes = chunk_records * self.dtype.itemsize
        while True:
            data = self._handle.read(chunk_bytes)
            if not data:
                break
            yield np.frombuffer(data, dtype=self.dtype)

    def iter_kmers(self, chunk_records: int = DEFAULT_CHUNK_RECORDS) -> Iterator[CortexKmer]:
        for chunk in self.iter_records(chunk_records):
            for record in chunk:
                yield CortexKmer(
                    kmer=_combine_words(record["kmer"]),
                    coverages=tuple(int(c) for c in record["coverages"]),
                    edges=tuple(int(e) for e in record["edges"]),
                )

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "CortexBinary":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
