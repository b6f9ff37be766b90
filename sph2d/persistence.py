"""
Frame traces: one line of particle positions per frame.

Line format (no header):

    x0 y0;x1 y1;...;xn yn

Coordinates use fixed notation with 10 decimals; the particle separator
is configurable and defaults to ';'.
"""

import logging
from typing import Iterator, Optional

import numpy as np

from .errors import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_DELIMITER = ";"
DECIMALS = 10


def format_frame(positions: np.ndarray, delimiter: str = DEFAULT_DELIMITER) -> str:
    """Render an (n, 2) position array as one trace line (without newline)."""
    return delimiter.join(f"{x:.{DECIMALS}f} {y:.{DECIMALS}f}" for x, y in positions)


def parse_frame(line: str, delimiter: str = DEFAULT_DELIMITER,
                line_number: Optional[int] = None) -> np.ndarray:
    """Parse one trace line into an (n, 2) array.

    Raises:
        PersistenceError: If a record is not two numbers
    """
    line = line.rstrip("\r\n")
    where = f"line {line_number}" if line_number is not None else "frame"
    if not line:
        return np.empty((0, 2), dtype=np.float64)

    records = line.split(delimiter)
    positions = np.empty((len(records), 2), dtype=np.float64)
    for i, record in enumerate(records):
        parts = record.split()
        if len(parts) != 2:
            raise PersistenceError(f"{where}: particle {i}: expected 'x y', got {record!r}")
        try:
            positions[i, 0] = float(parts[0])
            positions[i, 1] = float(parts[1])
        except ValueError as e:
            raise PersistenceError(f"{where}: particle {i}: {e}") from e
    return positions


class FrameWriter:
    """Appends one line per frame to a trace file.

    The file is truncated when the writer is created, so a solver run
    always starts a fresh trace.
    """

    def __init__(self, path: str, delimiter: str = DEFAULT_DELIMITER):
        self.path = str(path)
        self.delimiter = delimiter
        self.frames_written = 0
        try:
            with open(self.path, 'w'):
                pass
        except OSError as e:
            raise PersistenceError(f"Cannot create trace file {self.path}: {e}") from e
        logger.debug("Writing frames to %s", self.path)

    def write_frame(self, positions: np.ndarray):
        """Append one frame.

        Raises:
            PersistenceError: If the file cannot be opened or written
        """
        line = format_frame(positions, self.delimiter)
        try:
            with open(self.path, 'a') as f:
                f.write(line + "\n")
        except OSError as e:
            raise PersistenceError(f"Cannot write frame to {self.path}: {e}") from e
        self.frames_written += 1


class FrameReader:
    """Streams frames from a trace file, one (n, 2) array per line.

    Usage:
        with FrameReader(path) as reader:
            for positions in reader:
                ...
    """

    def __init__(self, path: str, delimiter: str = DEFAULT_DELIMITER):
        self.path = str(path)
        self.delimiter = delimiter
        try:
            self._file = open(self.path, 'r')
        except OSError as e:
            raise PersistenceError(f"Cannot open trace file {self.path}: {e}") from e

    def __iter__(self) -> Iterator[np.ndarray]:
        for line_number, line in enumerate(self._file, start=1):
            yield parse_frame(line, self.delimiter, line_number)

    def close(self):
        self._file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def iter_frames(path: str, delimiter: str = DEFAULT_DELIMITER) -> Iterator[np.ndarray]:
    """Yield every frame of a trace file."""
    with FrameReader(path, delimiter) as reader:
        yield from reader
