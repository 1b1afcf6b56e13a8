import argparse
import pathlib
from typing import List, Optional

from pydantic import BaseModel, Field, FilePath, ValidationError, field_validator

from .encoding import DEFAULT_PATTERN_LENGTH
from .exceptions import InvalidParameterError
from .sequence import DEFAULT_SENTINEL, VALID_NUCLEOTIDES, ComplementPolicy
from .shear import DEFAULT_KMER_LENGTH, MIN_KMER_LENGTH


class ShearSettings(BaseModel):
    """Validated settings for the ``shear`` command."""

    kmer_length: int = Field(
        DEFAULT_KMER_LENGTH, ge=MIN_KMER_LENGTH, description="Window width k."
    )
    sentinel: str = Field(
        DEFAULT_SENTINEL, min_length=1, max_length=1, description="Padding symbol."
    )
    lenient: bool = Field(
        False, description="Pass symbols with no complement through unchanged."
    )

    @field_validator("sentinel")
    @classmethod
    def sentinel_outside_alphabet(cls, v: str) -> str:
        if v.upper() in VALID_NUCLEOTIDES:
            raise ValueError(f"Sentinel '{v}' must not be a nucleotide symbol.")
        return v

    @property
    def policy(self) -> ComplementPolicy:
        return ComplementPolicy.PASSTHROUGH if self.lenient else ComplementPolicy.STRICT


class ScanSettings(BaseModel):
    """Validated settings for the ``scan`` command."""

    reference: FilePath = Field(description="FASTA file holding the reference sequence.")
    pattern_length: int = Field(
        DEFAULT_PATTERN_LENGTH, gt=0, description="Bases per bit-packed pattern."
    )


def build_settings(model: type, **values) -> BaseModel:
    """Instantiate a settings model, reporting failures as InvalidParameterError."""
    try:
        return model(**values)
    except ValidationError as e:
        raise InvalidParameterError(
            f"Invalid {model.__name__}",
            details={
                ".".join(str(part) for part in error["loc"]): error["msg"]
                for error in e.errors()
            },
        ) from e


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="kmershear",
        description="kmershear: k-mer shearing and small DNA sequence utilities.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Console logging level.",
    )
    parser.add_argument(
        "--log-file",
        type=pathlib.Path,
        default=None,
        help="Also write DEBUG logs to this file.",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON objects.",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar on stderr.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    shear_parser = subparsers.add_parser(
        "shear",
        help="Print sorted (context, next-symbol) edges and branch flags.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    shear_parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="FASTA or one-sequence-per-line file, possibly gzipped ('-' for stdin).",
    )
    shear_parser.add_argument(
        "-k",
        "--kmer-length",
        type=int,
        default=DEFAULT_KMER_LENGTH,
        help="Window width.",
    )
    shear_parser.add_argument(
        "--sentinel",
        default=DEFAULT_SENTINEL,
        help="Padding symbol outside A/C/G/T.",
    )
    shear_parser.add_argument(
        "--lenient",
        action="store_true",
        help="Pass symbols with no complement through instead of failing.",
    )
    shear_parser.add_argument(
        "--table",
        type=pathlib.Path,
        default=None,
        help="Also write all edges to this table file.",
    )
    shear_parser.add_argument(
        "--format",
        dest="table_format",
        choices=["tsv", "parquet"],
        default="tsv",
        help="Format of --table.",
    )

    orient_parser = subparsers.add_parser(
        "orient",
        help="Print whether each line sorts before its reverse complement.",
    )
    orient_parser.add_argument("input", nargs="?", default="-")

    scan_parser = subparsers.add_parser(
        "scan",
        help="Decode bit-packed patterns and look them up in a reference.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    scan_parser.add_argument("input", nargs="?", default="-")
    scan_parser.add_argument(
        "-r",
        "--reference",
        type=pathlib.Path,
        required=True,
        help="Reference FASTA file.",
    )
    scan_parser.add_argument(
        "--pattern-length",
        type=int,
        default=DEFAULT_PATTERN_LENGTH,
        help="Bases per pattern (two binary digits each).",
    )

    cortex_parser = subparsers.add_parser(
        "cortex",
        help="Print a cortex binary header and its k-mers.",
    )
    cortex_parser.add_argument("path", type=pathlib.Path)
    cortex_parser.add_argument(
        "--header-only",
        action="store_true",
        help="Print the header summary only.",
    )
    cortex_parser.add_argument(
        "--table",
        type=pathlib.Path,
        default=None,
        help="Write k-mers, coverage and edges to this table instead of stdout.",
    )
    cortex_parser.add_argument(
        "--format",
        dest="table_format",
        choices=["tsv", "parquet"],
        default="tsv",
    )
    return parser


def process_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for kmershear.

    Returns:
        argparse.Namespace: parsed arguments; ``command`` names the sub-command.
    """
    return build_parser().parse_args(argv)
