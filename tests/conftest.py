"""Shared test configuration, fixtures and scripted collaborators."""

import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pytest
from loguru import logger

from hevc_batch.config.settings import BatchConfig
from hevc_batch.domain.exceptions import MediaFileException
from hevc_batch.domain.media import MediaInspector
from hevc_batch.domain.models import EncodeResult, FileJob
from hevc_batch.services.encoder_service import EncoderInvoker, encoded_output_path
from hevc_batch.services.file_service import FileRelocator


def write_file(path: Path, size: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\0" * size)
    return path


class ScriptedEncoder(EncoderInvoker):
    """
    Writes an output file of a scripted size instead of running FFmpeg.

    `script` maps input file names to `(exit_code, output_size)`; an
    output size of None produces no output file.
    """

    def __init__(self, script: Dict[str, Tuple[int, Optional[int]]]):
        self.script = script
        self.calls: List[str] = []

    def encode(self, job: FileJob, config: BatchConfig, job_log=None) -> EncodeResult:
        self.calls.append(job.file_name)
        exit_code, output_size = self.script.get(job.file_name, (0, None))
        output_path = encoded_output_path(job, config)
        if output_size is not None:
            write_file(output_path, output_size)
        return EncodeResult(output_path=output_path, process_exit_code=exit_code)


class ScriptedInspector(MediaInspector):
    """Returns scripted durations by file name; unknown or missing files are unreadable."""

    def __init__(self, durations: Dict[str, Union[float, Exception]]):
        self.durations = durations

    def duration(self, path: Path) -> float:
        value = self.durations.get(path.name)
        if value is None or not path.exists():
            raise MediaFileException(f"Cannot open {path}")
        if isinstance(value, Exception):
            raise value
        return value


class FullDestinationRelocator(FileRelocator):
    """Fails every move into the destination folder, like a full volume."""

    def __init__(self, destination: Path):
        self.destination = destination
        self.failed_moves: List[Path] = []

    def move(self, src: Path, dst: Path, overwrite: bool = False) -> bool:
        if dst.parent == self.destination:
            self.failed_moves.append(dst)
            return False
        return super().move(src, dst, overwrite)


@pytest.fixture(autouse=True)
def reset_loguru():
    """Restore the default stderr sink after tests that reconfigure loguru."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="DEBUG")


@pytest.fixture
def folders(tmp_path):
    source = tmp_path / "source"
    destination = tmp_path / "destination"
    logs = tmp_path / "logs"
    for folder in (source, destination, logs):
        folder.mkdir()
    return source, destination, logs


@pytest.fixture
def make_config(folders):
    source, destination, logs = folders

    def _make(**overrides) -> BatchConfig:
        values = dict(
            source_folder=source,
            destination_folder=destination,
            codec_quality=24,
            output_suffix="x",
            ignored_file_names=frozenset(),
            delete_source=False,
            delete_permanently=True,
            show_process_window=False,
            log_folder=logs,
        )
        values.update(overrides)
        return BatchConfig(**values)

    return _make
