"""
Command-line entry point: ``kmershear <command> ...``.
"""

import argparse
import logging
import sys
from typing import List, Optional, TextIO

import pandas as pd
from tqdm import tqdm

from .cortex import CortexBinary
from .exceptions import KmerShearException
from .logging_config import setup_logging
from .matching import ReferenceScanner
from .output import edges_to_frame, kmers_to_frame, write_table
from .parameter_config import ScanSettings, ShearSettings, build_settings, process_arguments
from .sequence import is_forward_canonical
from .shear import classify_branches, format_branch_table, format_edges, shear
from .utils import open_input, read_reference, read_sequences

logger = logging.getLogger(__name__)


def run_shear(args: argparse.Namespace, out: TextIO) -> None:
    settings: ShearSettings = build_settings(
        ShearSettings,
        kmer_length=args.kmer_length,
        sentinel=args.sentinel,
        lenient=args.lenient,
    )
    frames = []
    with open_input(args.input) as handle:
        records = tqdm(
            read_sequences(handle, settings.policy),
            desc="Shearing",
            unit="seq",
            disable=not args.progress,
        )
        for record in records:
            edges = shear(
                record.sequence_data,
                k=settings.kmer_length,
                sentinel=settings.sentinel,
                policy=settings.policy,
            )
            flags = classify_branches(edges)
            out.write("\n".join(format_edges(edges)) + "\n\n")
            out.write("\n".join(format_branch_table(edges, flags)) + "\n")
            if args.table is not None:
                frames.append(edges_to_frame(edges, flags, sequence_id=record.sequence_id))

    if args.table is not None and frames:
        write_table(pd.concat(frames, ignore_index=True), args.table, args.table_format)


def run_orient(args: argparse.Namespace, out: TextIO) -> None:
    with open_input(args.input) as handle:
        for line in handle:
            if line.strip():
                out.write(f"{str(is_forward_canonical(line)).lower()}\n")


def run_scan(args: argparse.Namespace, out: TextIO) -> None:
    settings: ScanSettings = build_settings(
        ScanSettings, reference=args.reference, pattern_length=args.pattern_length
    )
    scanner = ReferenceScanner(read_reference(settings.reference), settings.pattern_length)
    with open_input(args.input) as handle:
        for match in scanner.scan(handle):
            out.write(match.format() + "\n")


def run_cortex(args: argparse.Namespace, out: TextIO) -> None:
    with CortexBinary.open(args.path) as graph:
        out.write(graph.describe())
        if args.header_only:
            return
        records = tqdm(
            graph.iter_kmers(),
            total=graph.kmer_count,
            desc="Reading k-mers",
            unit="kmer",
            disable=not args.progress,
        )
        if args.table is not None:
            write_table(kmers_to_frame(records, graph.kmer_size), args.table, args.table_format)
            return
        for record in records:
            out.write(record.nucleotides(graph.kmer_size) + "\n")


COMMANDS = {
    "shear": run_shear,
    "orient": run_orient,
    "scan": run_scan,
    "cortex": run_cortex,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code."""
    args = process_arguments(argv)
    setup_logging(args.log_level, log_file=args.log_file, enable_json=args.json_logs)
    logger.debug(f"Running command '{args.command}'")

    try:
        COMMANDS[args.command](args, sys.stdout)
    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        return 1
    except (KmerShearException, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
