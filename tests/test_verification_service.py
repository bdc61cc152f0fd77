"""Verifier verdict and file management tests."""

import math

import pytest

from hevc_batch.domain.models import BatchState, EncodeResult, FileJob, Verdict
from hevc_batch.services.file_service import FileRelocator
from hevc_batch.services.logging_service import ErrorLog
from hevc_batch.services.verification_service import Verifier, destination_path, temp_copy_path

from .conftest import FullDestinationRelocator, ScriptedInspector, write_file


@pytest.fixture
def original(folders):
    source, _, _ = folders
    return FileJob.from_path(write_file(source / "movie.mov", 1000))


def encode(folders, size, exit_code=0):
    source, _, _ = folders
    output = source / "movie_x.mp4"
    if size is not None:
        write_file(output, size)
    return EncodeResult(output_path=output, process_exit_code=exit_code)


class TestPaths:
    def test_temp_copy_path(self, tmp_path):
        assert temp_copy_path(tmp_path / "movie_x.mp4") == tmp_path / "movie_x_TEMP.mp4"

    def test_destination_path_uses_original_stem(self, folders, make_config, original):
        _, destination, _ = folders
        assert destination_path(original, make_config()) == destination / "movie.mp4"


class TestVerifier:
    """Test each verdict branch against real files."""

    def test_failed_encode_rejected_and_partial_deleted(self, folders, make_config, original):
        result = encode(folders, 200, exit_code=1)
        verifier = Verifier(ScriptedInspector({}), FileRelocator())

        outcome = verifier.verify(original, result, make_config(delete_source=True), BatchState(delete_source=True))

        assert outcome.verdict is Verdict.REJECTED
        assert outcome.artifact_retained is False
        assert not result.output_path.exists()
        assert original.path.exists()

    def test_failed_encode_without_output(self, folders, make_config, original):
        result = encode(folders, None, exit_code=-1)
        verifier = Verifier(ScriptedInspector({}), FileRelocator())

        outcome = verifier.verify(original, result, make_config(), BatchState())

        assert outcome.verdict is Verdict.REJECTED
        assert "-1" in outcome.reason

    def test_duration_mismatch_aborts_and_preserves_files(self, folders, make_config, original):
        _, destination, logs = folders
        result = encode(folders, 500)
        inspector = ScriptedInspector({"movie.mov": 60.0, "movie_x.mp4": 59.0})
        verifier = Verifier(inspector, FileRelocator(), ErrorLog(logs))

        outcome = verifier.verify(original, result, make_config(delete_source=True), BatchState(delete_source=True))

        assert outcome.verdict is Verdict.ABORTED
        assert outcome.duration_delta == pytest.approx(1.0)
        assert outcome.artifact_retained is True
        assert original.path.exists()
        assert result.output_path.exists()
        assert list(destination.iterdir()) == []
        assert "movie.mov" in (logs / "error.txt").read_text(encoding="utf-8")

    def test_nan_duration_fails_closed(self, folders, make_config, original):
        result = encode(folders, 500)
        inspector = ScriptedInspector({"movie.mov": math.nan, "movie_x.mp4": 60.0})

        outcome = Verifier(inspector, FileRelocator()).verify(original, result, make_config(), BatchState())

        assert outcome.verdict is Verdict.ABORTED

    def test_unmeasurable_duration_aborts(self, folders, make_config, original):
        result = encode(folders, 500)
        inspector = ScriptedInspector({"movie.mov": 60.0})

        outcome = Verifier(inspector, FileRelocator()).verify(original, result, make_config(), BatchState())

        assert outcome.verdict is Verdict.ABORTED
        assert outcome.duration_delta is None

    def test_equal_size_rejected(self, folders, make_config, original):
        result = encode(folders, 1000)
        inspector = ScriptedInspector({"movie.mov": 60.0, "movie_x.mp4": 60.0})

        outcome = Verifier(inspector, FileRelocator()).verify(original, result, make_config(), BatchState())

        assert outcome.verdict is Verdict.REJECTED
        assert outcome.size_delta == 0
        assert outcome.size_percentage == 100.0
        assert not result.output_path.exists()
        assert original.path.exists()

    def test_smaller_encode_accepted(self, folders, make_config, original):
        source, destination, _ = folders
        result = encode(folders, 250)
        inspector = ScriptedInspector({"movie.mov": 60.0, "movie_x.mp4": 60.0})
        state = BatchState(delete_source=True)

        outcome = Verifier(inspector, FileRelocator()).verify(
            original, result, make_config(delete_source=True), state
        )

        assert outcome.verdict is Verdict.ACCEPTED
        assert outcome.duration_delta == 0.0
        assert outcome.size_delta == 750
        assert outcome.size_percentage == 25.0
        assert outcome.artifact_retained is False
        assert not original.path.exists()
        assert not result.output_path.exists()
        assert (destination / "movie.mp4").stat().st_size == 250
        assert not (source / "movie_x_TEMP.mp4").exists()
        assert state.delete_source is True

    def test_existing_destination_file_not_overwritten(self, folders, make_config, original):
        _, destination, _ = folders
        write_file(destination / "movie.mp4", 7)
        result = encode(folders, 250)
        inspector = ScriptedInspector({"movie.mov": 60.0, "movie_x.mp4": 60.0})
        state = BatchState(delete_source=False)

        outcome = Verifier(inspector, FileRelocator()).verify(original, result, make_config(), state)

        assert outcome.verdict is Verdict.REJECTED
        assert outcome.artifact_retained is True
        assert (destination / "movie.mp4").stat().st_size == 7
        assert result.output_path.exists()

    def test_move_failure_downgrades_source_deletion(self, folders, make_config, original):
        source, destination, _ = folders
        result = encode(folders, 250)
        inspector = ScriptedInspector({"movie.mov": 60.0, "movie_x.mp4": 60.0})
        state = BatchState(delete_source=True)

        outcome = Verifier(inspector, FullDestinationRelocator(destination)).verify(
            original, result, make_config(delete_source=True), state
        )

        assert outcome.verdict is Verdict.REJECTED
        assert outcome.artifact_retained is True
        assert state.delete_source is False
        assert result.output_path.exists()
        assert not (source / "movie_x_TEMP.mp4").exists()
        assert list(destination.iterdir()) == []
