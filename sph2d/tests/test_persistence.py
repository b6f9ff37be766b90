"""
Tests for frame trace reading and writing.
"""

import numpy as np
import pytest
from sph2d import SphSolver, SolverSettings
from sph2d.errors import PersistenceError
from sph2d.persistence import FrameReader, FrameWriter, format_frame, iter_frames, parse_frame


class TestFormat:

    def test_fixed_ten_decimals(self):
        line = format_frame(np.array([[1.5, 2.0], [-0.25, 1e-12]]))
        assert line == "1.5000000000 2.0000000000;-0.2500000000 0.0000000000"

    def test_custom_delimiter(self):
        line = format_frame(np.array([[1.0, 2.0], [3.0, 4.0]]), delimiter="|")
        assert line == "1.0000000000 2.0000000000|3.0000000000 4.0000000000"

    def test_parse(self):
        positions = parse_frame("1.5000000000 2.0000000000;3.0 -4.0\n")
        np.testing.assert_array_equal(positions, [[1.5, 2.0], [3.0, -4.0]])

    def test_parse_empty_line(self):
        assert parse_frame("\n").shape == (0, 2)

    @pytest.mark.parametrize("line", ["1.0 2.0;3.0", "1.0 2.0 3.0", "1.0 abc"])
    def test_parse_malformed(self, line):
        with pytest.raises(PersistenceError):
            parse_frame(line, line_number=3)

    def test_round_trip_precision(self, rng):
        positions = rng.uniform(-1000.0, 1000.0, size=(50, 2))
        restored = parse_frame(format_frame(positions))
        np.testing.assert_allclose(restored, positions, rtol=0, atol=5e-11)


class TestWriterReader:

    def test_writer_truncates(self, tmp_path):
        path = tmp_path / "trace.csv"
        path.write_text("stale contents\n")
        FrameWriter(path)
        assert path.read_text() == ""

    def test_one_line_per_frame(self, tmp_path):
        path = tmp_path / "trace.csv"
        writer = FrameWriter(path)
        writer.write_frame(np.array([[1.0, 2.0]]))
        writer.write_frame(np.array([[3.0, 4.0]]))
        assert writer.frames_written == 2
        assert path.read_text().splitlines() == ["1.0000000000 2.0000000000",
                                                 "3.0000000000 4.0000000000"]

    def test_reader_streams_frames(self, tmp_path):
        path = tmp_path / "trace.csv"
        writer = FrameWriter(path, delimiter="|")
        frames = [np.array([[0.5, 1.5], [2.5, 3.5]]), np.array([[4.0, 5.0], [6.0, 7.0]])]
        for frame in frames:
            writer.write_frame(frame)

        with FrameReader(path, delimiter="|") as reader:
            read = list(reader)
        assert len(read) == 2
        for expected, actual in zip(frames, read):
            np.testing.assert_array_equal(actual, expected)

    def test_malformed_line_reports_line_number(self, tmp_path):
        path = tmp_path / "trace.csv"
        path.write_text("1.0 2.0\n1.0;2.0\n")
        with pytest.raises(PersistenceError, match="line 2"):
            list(iter_frames(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(PersistenceError):
            list(iter_frames(tmp_path / "missing.csv"))

    def test_unwritable_destination(self, tmp_path):
        with pytest.raises(PersistenceError):
            FrameWriter(tmp_path / "no_such_dir" / "trace.csv")

    def test_persistence_error_is_oserror(self, tmp_path):
        with pytest.raises(OSError):
            FrameWriter(tmp_path / "no_such_dir" / "trace.csv")


class TestSolverOutput:

    def test_solver_writes_each_update(self, tmp_path):
        path = tmp_path / "frames.csv"
        path.write_text("old run\n")
        solver = SphSolver(30, str(path), settings=SolverSettings(backend="cpu"))
        assert path.read_text() == ""

        solver.update()
        solver.update()
        frames = list(iter_frames(path))
        assert len(frames) == 2
        np.testing.assert_allclose(frames[-1], solver.get_positions(), rtol=0, atol=1e-9)

    def test_solver_uses_settings_delimiter(self, tmp_path):
        path = tmp_path / "frames.csv"
        solver = SphSolver(3, str(path), settings=SolverSettings(backend="cpu", delimiter=","))
        solver.update()
        assert path.read_text().count(",") == 2
