"""
Trace Record Formats

Defines the trace file formats the simulator replays. A trace is a stream of
resolved conditional branches: an address and whether the branch was taken.
"""

import logging
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional, TextIO

logger = logging.getLogger(__name__)


@dataclass
class BranchRecord:
    """One resolved conditional branch."""
    pc: int              # Branch instruction address
    taken: bool          # Branch outcome
    target: int = 0      # Branch target (informational)

    # Optional metadata
    instruction_count: Optional[int] = None


class TraceFormat(ABC):
    """Reader/writer for one on-disk record layout."""

    # Whether files of this format are opened in text mode
    text_mode = False

    @abstractmethod
    def parse(self, file_handle) -> Iterator[BranchRecord]:
        """Yield the records of an open trace, in file order."""
        pass

    @abstractmethod
    def write(self, file_handle, record: BranchRecord) -> None:
        """Write one record in this format."""
        pass


def _parse_int(text: str) -> int:
    return int(text, 16) if text.lower().startswith('0x') else int(text)


class SimpleTextFormat(TraceFormat):
    """
    Simple text trace format.

    Format: PC OUTCOME [TARGET]
    Example:
        0x400100 T 0x400200
        0x400108 N
    """

    text_mode = True
    TAKEN_TOKENS = ('T', '1', 'TAKEN', 'TRUE', 'Y')

    def __init__(self):
        self.malformed_lines = 0

    def parse(self, file_handle: TextIO) -> Iterator[BranchRecord]:
        for line_num, line in enumerate(file_handle, 1):
            line = line.strip()

            # Blank lines and # comments carry no record
            if not line or line.startswith('#'):
                continue

            parts = line.split()
            if len(parts) < 2:
                self.malformed_lines += 1
                logger.debug("Skipping line %d: expected 'PC OUTCOME'", line_num)
                continue

            try:
                pc = _parse_int(parts[0])
                target = _parse_int(parts[2]) if len(parts) >= 3 else 0
            except ValueError:
                self.malformed_lines += 1
                logger.debug("Skipping line %d: bad number in %r", line_num, line)
                continue

            yield BranchRecord(
                pc=pc,
                taken=parts[1].upper() in self.TAKEN_TOKENS,
                target=target,
            )

    def write(self, file_handle: TextIO, record: BranchRecord) -> None:
        outcome = 'T' if record.taken else 'N'
        file_handle.write(f"0x{record.pc:x} {outcome} 0x{record.target:x}\n")


class BinaryTraceFormat(TraceFormat):
    """
    Fixed-size binary records.

    Each record is 9 bytes, little endian: 8 bytes PC + 1 byte flags.
    Flags bit 0 is the branch outcome.
    """

    RECORD = struct.Struct('<QB')

    def parse(self, file_handle: BinaryIO) -> Iterator[BranchRecord]:
        """Parse binary trace format."""
        record_size = self.RECORD.size
        count = 0

        while True:
            data = file_handle.read(record_size)
            if not data:
                break
            if len(data) < record_size:
                logger.warning("Ignoring truncated trailing record (%d bytes)", len(data))
                break

            pc, flags = self.RECORD.unpack(data)
            count += 1

            yield BranchRecord(
                pc=pc,
                taken=(flags & 0x1) != 0,
                instruction_count=count,
            )

    def write(self, file_handle: BinaryIO, record: BranchRecord) -> None:
        file_handle.write(self.RECORD.pack(record.pc, 1 if record.taken else 0))
