"""
Tabular output of sheared edges and cortex k-mers.
"""

import logging
import pathlib
from typing import Iterable, Literal, Optional, Sequence

import pandas as pd

from .cortex import CortexKmer
from .exceptions import InvalidParameterError
from .genomic_types import BranchFlag, Edge
from .shear import classify_branches

logger = logging.getLogger(__name__)

TableFormat = Literal["tsv", "parquet"]
EDGE_COLUMNS = ["sequence_id", "context", "next_symbol", "branch_flag"]


def edges_to_frame(
    edges: Sequence[Edge],
    flags: Optional[Sequence[BranchFlag]] = None,
    sequence_id: str = "",
) -> pd.DataFrame:
    """
    Build a DataFrame of edges in their sorted order.

    Branch flags are computed with :func:`classify_branches` when not given.
    """
    if flags is None:
        flags = classify_branches(edges)
    if len(flags) != len(edges):
        raise InvalidParameterError(
            "Flag count does not match edge count",
            details={"edges": len(edges), "flags": len(flags)},
        )
    frame = pd.DataFrame(
        {
            "sequence_id": [sequence_id] * len(edges),
            "context": [context for context, _ in edges],
            "next_symbol": [next_symbol for _, next_symbol in edges],
            "branch_flag": pd.Series(flags, dtype="uint8"),
        },
        columns=EDGE_COLUMNS,
    )
    return frame


def kmers_to_frame(records: Iterable[CortexKmer], kmer_size: int) -> pd.DataFrame:
    """One row per cortex k-mer: nucleotides, total coverage and combined edges."""
    rows = [
        {
            "kmer": record.nucleotides(kmer_size),
            "coverage": sum(record.coverages),
            "edges": record.all_edges(),
        }
        for record in records
    ]
    return pd.DataFrame(rows, columns=["kmer", "coverage", "edges"])


def write_table(
    frame: pd.DataFrame, path: pathlib.Path, fmt: TableFormat = "tsv"
) -> pathlib.Path:
    """Write ``frame`` as TSV or Parquet (pyarrow engine)."""
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "tsv":
        frame.to_csv(path, sep="\t", index=False)
    elif fmt == "parquet":
        frame.to_parquet(path, engine="pyarrow", index=False)
    else:
        raise InvalidParameterError(
            "Unsupported table format", details={"format": fmt}
        )
    logger.info(f"Wrote {len(frame)} rows to {path}")
    return path
