"""
Trace Parser

Opens trace files (plain or compressed), picks the record format and streams
BranchRecords to the simulator. Also generates synthetic traces.
"""

import bz2
import gzip
import lzma
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Union

import numpy as np

from .formats import TraceFormat, BranchRecord, SimpleTextFormat, BinaryTraceFormat


@dataclass
class TraceInfo:
    """What can be learned about a trace without reading it."""
    path: str
    format: str
    compression: Optional[str]
    size_bytes: int
    estimated_branches: int


class BranchTrace:
    """
    A trace held in memory.

    Unlike the streaming parser it can be replayed any number of times.
    """

    def __init__(self, records: Optional[List[BranchRecord]] = None):
        self.records = list(records) if records else []

    def __iter__(self) -> Iterator[BranchRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, idx: int) -> BranchRecord:
        return self.records[idx]

    def get_statistics(self) -> dict:
        """Outcome mix and static branch count."""
        n = len(self.records)
        if n == 0:
            return {'count': 0}

        taken = np.fromiter((r.taken for r in self.records), dtype=bool, count=n)
        pcs = np.fromiter((r.pc for r in self.records), dtype=np.uint64, count=n)
        n_taken = int(taken.sum())

        return {
            'count': n,
            'taken': n_taken,
            'not_taken': n - n_taken,
            'taken_ratio': n_taken / n,
            'unique_pcs': int(np.unique(pcs).size),
        }


class TraceParser:
    """
    Reads branch traces, choosing format and decompression from the file name
    unless a format is forced.
    """

    FORMATS = {
        'text': SimpleTextFormat,
        'binary': BinaryTraceFormat,
    }

    # Suffix -> opener
    COMPRESSION = {
        '.gz': gzip.open,
        '.gzip': gzip.open,
        '.xz': lzma.open,
        '.bz2': bz2.open,
        '.lzma': lzma.open,
    }

    # Average on-disk bytes per record, for size-based estimates
    _BYTES_PER_BRANCH = {
        'text': 20,
        'binary': BinaryTraceFormat.RECORD.size,
    }

    def __init__(self, format_name: Optional[str] = None):
        """
        Args:
            format_name: 'text' or 'binary'; detected per file when None
        """
        if format_name and format_name.lower() not in self.FORMATS:
            raise ValueError(
                f"Unknown trace format: {format_name} (choose from {self.list_supported_formats()})"
            )
        self.format_name = format_name

    def parse_file(self, filepath: Union[str, Path],
                   max_branches: Optional[int] = None,
                   skip_branches: int = 0) -> Iterator[BranchRecord]:
        """
        Stream the records of a trace file.

        Args:
            filepath: Trace to read
            max_branches: Stop after this many records (None reads to the end)
            skip_branches: Records to drop from the front first

        Yields:
            One BranchRecord per resolved branch
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Trace file not found: {path}")

        record_format = self._get_format(path)
        handle = self._open(path, record_format)

        try:
            emitted = 0
            for position, record in enumerate(record_format.parse(handle)):
                if position < skip_branches:
                    continue
                if max_branches is not None and emitted >= max_branches:
                    break
                yield record
                emitted += 1
        finally:
            handle.close()

    def load_trace(self, filepath: Union[str, Path],
                   max_branches: Optional[int] = None,
                   skip_branches: int = 0) -> BranchTrace:
        """Read a whole trace (or a window of it) into a BranchTrace."""
        return BranchTrace(list(self.parse_file(filepath, max_branches, skip_branches)))

    def get_trace_info(self, filepath: Union[str, Path]) -> TraceInfo:
        """Format, compression and an estimated branch count from the file size."""
        path = Path(filepath)
        compression = self._compression_of(path)
        format_name = self._format_name_for(path)
        size = path.stat().st_size

        estimate = size // self._BYTES_PER_BRANCH[format_name]
        if compression:
            # Rough 10:1 ratio for compressed traces
            estimate *= 10

        return TraceInfo(
            path=str(path),
            format=format_name,
            compression=compression[1:] if compression else None,
            size_bytes=size,
            estimated_branches=estimate,
        )

    def _open(self, filepath: Path, record_format: TraceFormat, writing: bool = False):
        """Open a trace, through its decompressor if the suffix names one."""
        mode = ('w' if writing else 'r') + ('t' if record_format.text_mode else 'b')
        compression = self._compression_of(filepath)
        if compression:
            return self.COMPRESSION[compression](filepath, mode)
        return open(filepath, mode)

    def _compression_of(self, filepath: Path) -> Optional[str]:
        suffix = filepath.suffix.lower()
        return suffix if suffix in self.COMPRESSION else None

    def _get_format(self, filepath: Path) -> TraceFormat:
        return self.FORMATS[self._format_name_for(filepath)]()

    def _format_name_for(self, filepath: Path) -> str:
        if self.format_name:
            return self.format_name.lower()
        return self._detect_format(filepath)

    def _detect_format(self, filepath: Path) -> str:
        """`.bin` (under any compression suffix) is binary; everything else text."""
        if self._compression_of(filepath):
            filepath = filepath.with_suffix('')
        if filepath.suffix.lower() == '.bin':
            return 'binary'
        return 'text'

    @classmethod
    def list_supported_formats(cls) -> List[str]:
        return list(cls.FORMATS)


SAMPLE_PATTERNS = ('alternating', 'loop', 'biased', 'random')


def generate_branches(num_branches: int, pattern: str = 'random',
                      pc: int = 0x400000,
                      seed: Optional[int] = None) -> Iterator[BranchRecord]:
    """
    Synthesize branch records.

    Patterns:
        alternating: one branch flipping every time, starting not taken
        loop: one back-edge, taken nine times then falling through
        biased: 64 branches, each 80% taken
        random: up to 1024 branches, 50% taken

    Args:
        num_branches: Records to produce
        pattern: One of SAMPLE_PATTERNS
        pc: Address of the first branch
        seed: Seed for the random patterns
    """
    if pattern not in SAMPLE_PATTERNS:
        raise ValueError(f"Unknown pattern: {pattern} (choose from {SAMPLE_PATTERNS})")

    rng = random.Random(seed)

    for i in range(num_branches):
        branch_pc = pc
        if pattern == 'alternating':
            taken = i % 2 == 1
        elif pattern == 'loop':
            taken = i % 10 != 9
        elif pattern == 'biased':
            taken = rng.random() < 0.8
            branch_pc = pc + 4 * (i % 64)
        else:
            taken = rng.random() < 0.5
            branch_pc = pc + 4 * rng.randint(0, 0x3ff)

        target = branch_pc + 0x100 if taken else branch_pc + 4
        yield BranchRecord(pc=branch_pc, taken=taken, target=target)


def create_sample_trace(filepath: Union[str, Path],
                        num_branches: int = 10000,
                        pattern: str = 'random',
                        seed: Optional[int] = None) -> Path:
    """
    Write a synthetic trace.

    The record format and compression follow the file name, the same way
    TraceParser reads them back. Text traces start with a commented header.

    Returns:
        The path written
    """
    path = Path(filepath)
    parser = TraceParser()
    record_format = parser._get_format(path)

    with parser._open(path, record_format, writing=True) as f:
        if record_format.text_mode:
            f.write("# Synthetic branch trace\n")
            f.write(f"# Pattern: {pattern}, branches: {num_branches}\n")
            f.write("# PC OUTCOME TARGET\n")

        for record in generate_branches(num_branches, pattern, seed=seed):
            record_format.write(f, record)

    return path
