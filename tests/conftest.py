import pathlib
import struct
from typing import List, Sequence, Tuple

import pytest

from kmershear.encoding import encode_kmer


GOLDEN_SEQUENCE = "TACGACGTCGACT"

# shear(GOLDEN_SEQUENCE, k=4, sentinel="$"), the reverse complement being
# "AGTCGACGTCGTA"
GOLDEN_EDGES = [
    ("$$$", "A"),
    ("$$$", "T"),
    ("$$A", "G"),
    ("CGA", "C"),
    ("$TA", "C"),
    ("GTA", "$"),
    ("GAC", "G"),
    ("GAC", "T"),
    ("TAC", "G"),
    ("GTC", "G"),
    ("$AG", "T"),
    ("ACG", "A"),
    ("ACG", "T"),
    ("TCG", "A"),
    ("TCG", "T"),
    ("$$T", "A"),
    ("ACT", "$"),
    ("AGT", "C"),
    ("CGT", "A"),
    ("CGT", "C"),
]

GOLDEN_FLAGS = [0, 1, 1, 1, 1, 1, 0, 1, 1, 1, 1, 0, 1, 0, 1, 1, 1, 1, 0, 1]


def build_cortex_binary(
    kmer_size: int,
    colour_names: Sequence[str],
    records: Sequence[Tuple[str, Sequence[int], Sequence[int]]],
    words_per_kmer: int = 1,
    version: int = 6,
    trailing_magic: bytes = b"CORTEX",
) -> bytes:
    """Assemble a little-endian cortex_var binary in memory."""
    colour_count = len(colour_names)
    parts: List[bytes] = [b"CORTEX", struct.pack("<4I", version, kmer_size, words_per_kmer, colour_count)]
    parts += [struct.pack("<I", 70) for _ in colour_names]
    parts += [struct.pack("<Q", 14000) for _ in colour_names]
    for name in colour_names:
        encoded = name.encode("ascii")
        parts.append(struct.pack("<I", len(encoded)) + encoded)
    parts += [bytes(16) for _ in colour_names]
    for _ in colour_names:
        parts.append(struct.pack("<4B", 1, 0, 1, 0))
        parts.append(struct.pack("<II", 2, 3))
        parts.append(struct.pack("<I", len(b"clean")) + b"clean")
    parts.append(trailing_magic)

    for kmer, coverages, edges in records:
        value = encode_kmer(kmer)
        words = [(value >> (64 * i)) & 0xFFFFFFFFFFFFFFFF for i in range(words_per_kmer)]
        parts.append(struct.pack(f"<{words_per_kmer}Q", *words))
        parts.append(struct.pack(f"<{colour_count}I", *coverages))
        parts.append(struct.pack(f"<{colour_count}B", *edges))
    return b"".join(parts)


@pytest.fixture
def golden_sequence() -> str:
    return GOLDEN_SEQUENCE


@pytest.fixture
def cortex_records():
    return [
        ("ACGTA", (5, 0, 1), (0b00000001, 0b00010000, 0)),
        ("CCCGG", (1, 1, 1), (0, 0, 0)),
        ("TTTTT", (0, 9, 0), (0b10001000, 0, 0b00000100)),
    ]


@pytest.fixture
def cortex_file(tmp_path: pathlib.Path, cortex_records) -> pathlib.Path:
    path = tmp_path / "three_colours.ctx"
    path.write_bytes(build_cortex_binary(5, ["org1", "org2", "org3"], cortex_records))
    return path


@pytest.fixture
def reference_fasta(tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "reference.fa"
    path.write_text(">ref description\nGGCAGATTCC\nCCCTAGACCC\n")
    return path
