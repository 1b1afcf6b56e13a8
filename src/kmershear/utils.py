import contextlib
import gzip
import io
import mimetypes
import pathlib
import sys
from typing import Iterator, Optional, TextIO, Union

from Bio import SeqIO

from .sequence import ComplementPolicy, GenomicSequence


def open_file_transparently(
    file_path: Union[str, pathlib.Path], mode: str = "rt"
) -> TextIO:
    """Opens a file, transparently handling gzip compression.

    Infers compression from file extension. Defaults to text read mode.

    Args:
        file_path: Path to the file.
        mode: File open mode (e.g., "rt", "wt"). Defaults to "rt".

    Returns:
        A text file object.

    Raises:
        FileNotFoundError: If the file does not exist.
        IOError: If an I/O error occurs during opening.
        TypeError: If file_path is not a str or pathlib.Path.
    """
    if not isinstance(file_path, (str, pathlib.Path)):
        raise TypeError(
            f"file_path must be a string or pathlib.Path, not {type(file_path)}"
        )

    file_path = pathlib.Path(file_path)

    if "r" in mode and not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    _, encoding = mimetypes.guess_type(str(file_path))

    try:
        if encoding == "gzip":
            return gzip.open(file_path, mode=mode)  # type: ignore
        return open(file_path, mode=mode)
    except (IOError, OSError) as e:
        raise IOError(f"Error opening file {file_path} with mode '{mode}': {e}") from e


@contextlib.contextmanager
def open_input(path: Optional[Union[str, pathlib.Path]]) -> Iterator[TextIO]:
    """Open ``path`` for reading, or use stdin (left open) when it is None or '-'."""
    if path is None or str(path) == "-":
        yield sys.stdin
        return
    with open_file_transparently(path) as handle:
        yield handle


def read_sequences(
    handle: TextIO, policy: ComplementPolicy = ComplementPolicy.STRICT
) -> Iterator[GenomicSequence]:
    """
    Yield a GenomicSequence for each sequence in a text stream.

    FASTA input (first non-blank line starting with '>') is parsed with
    Biopython. Anything else is read as one sequence per non-blank line,
    numbered ``line_1``, ``line_2``, ... ``policy`` decides whether symbols
    outside A, C, G and T are rejected.
    """
    first_line = ""
    for first_line in handle:
        if first_line.strip():
            break
    else:
        return

    if first_line.lstrip().startswith(">"):
        rest = io.StringIO(first_line + handle.read())
        for record in SeqIO.parse(rest, "fasta"):
            yield GenomicSequence(record.id, str(record.seq), policy)
        return

    yield GenomicSequence("line_1", first_line, policy)
    line_number = 1
    for line in handle:
        if line.strip():
            line_number += 1
            yield GenomicSequence(f"line_{line_number}", line, policy)


def read_reference(file_path: Union[str, pathlib.Path]) -> str:
    """Concatenate every record of a FASTA file into one sequence string."""
    with open_file_transparently(file_path) as handle:
        return "".join(str(record.seq) for record in SeqIO.parse(handle, "fasta"))
