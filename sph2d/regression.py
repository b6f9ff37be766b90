"""
Trace recording and replay for regression checks.

A trace is a frame file as written by ``persistence.FrameWriter``. Replay
steps a freshly constructed solver once per recorded line and compares
every particle position against the record.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .errors import ConfigurationError
from .persistence import FrameReader, FrameWriter

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 1e-5


@dataclass
class TraceComparison:
    """Outcome of replaying a solver against a trace.

    Attributes:
        frames_checked: Number of recorded frames compared
        max_deviation: Largest Euclidean distance between a replayed and a
            recorded particle position
        first_failure: (frame, particle) of the first deviation above
            tolerance, None if all frames matched. Frames count from 1;
            particle is -1 when the particle counts differ.
        tolerance: Tolerance the comparison used
    """
    frames_checked: int = 0
    max_deviation: float = 0.0
    first_failure: Optional[Tuple[int, int]] = None
    tolerance: float = DEFAULT_TOLERANCE

    @property
    def passed(self) -> bool:
        return self.first_failure is None and self.frames_checked > 0

    def summary(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        text = (f"{status}: {self.frames_checked} frames, "
                f"max deviation {self.max_deviation:.3e} (tolerance {self.tolerance:g})")
        if self.first_failure is not None:
            frame, particle = self.first_failure
            text += f", first failure at frame {frame} particle {particle}"
        return text


def record_trace(solver, path: str, frames: int) -> int:
    """Advance ``solver`` ``frames`` times, writing each frame to ``path``.

    The file is truncated first. Returns the number of frames written.

    Raises:
        ConfigurationError: If the solver already writes its own output to ``path``
    """
    own_output = solver.output_path
    if own_output is not None and os.path.abspath(own_output) == os.path.abspath(path):
        raise ConfigurationError(
            f"Solver already writes frames to {path}; record to another file "
            f"or build the solver without an output path"
        )
    writer = FrameWriter(path, solver.settings.delimiter)
    for _ in range(frames):
        solver.update()
        writer.write_frame(solver.get_positions())
    logger.info("Recorded %d frames of %d particles to %s",
                writer.frames_written, solver.number_of_particles, path)
    return writer.frames_written


def compare_to_trace(solver, path: str, tolerance: float = DEFAULT_TOLERANCE,
                     stop_on_failure: bool = False) -> TraceComparison:
    """Step ``solver`` once per recorded frame and compare positions.

    Args:
        solver: Solver in the same initial state as when the trace was recorded
        path: Trace file
        tolerance: Maximum allowed Euclidean distance per particle
        stop_on_failure: Stop at the first frame that fails

    Returns:
        TraceComparison with the worst deviation and first failure

    Raises:
        PersistenceError: If the trace cannot be read or is malformed
    """
    result = TraceComparison(tolerance=tolerance)
    with FrameReader(path, solver.settings.delimiter) as reader:
        for frame, expected in enumerate(reader, start=1):
            solver.update()
            actual = solver.get_positions()
            result.frames_checked = frame

            if actual.shape != expected.shape:
                result.max_deviation = float("inf")
                if result.first_failure is None:
                    result.first_failure = (frame, -1)
                    logger.warning("Frame %d: %d particles, trace has %d",
                                   frame, len(actual), len(expected))
            else:
                deviation = np.hypot(actual[:, 0] - expected[:, 0], actual[:, 1] - expected[:, 1])
                worst = float(deviation.max(initial=0.0))
                # NaN positions never compare as within tolerance
                failing = np.flatnonzero(~(deviation <= tolerance))
                result.max_deviation = max(result.max_deviation, worst)
                if failing.size and result.first_failure is None:
                    result.first_failure = (frame, int(failing[0]))
                    logger.warning("Frame %d: particle %d deviates by %.3e",
                                   frame, failing[0], deviation[failing[0]])

            if stop_on_failure and result.first_failure is not None:
                break

    logger.info(result.summary())
    return result
