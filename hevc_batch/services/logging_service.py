"""
Log sinks for a batch run.

All human-readable logging goes through loguru. `setup_logging` installs the
console sink and the process-wide log file once per process. `JobLog` adds a
second file sink for the file currently being processed: every line written
through a `JobLog` lands in both the per-file log and the process log, with
indentation marking the comparison and file management sections.

Two additional files are written next to the logs:
- `BatchReport`: one structured YAML entry per processed file, meant for
  automated reporting.
- `ErrorLog`: plain text entries for aborts, naming the files preserved for
  manual inspection.
"""

import random
import string
import sys
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from loguru import logger

from ..config.common import (
    ERROR_LOG_FILE_NAME,
    FILE_LOGGER_FORMAT,
    JOB_LOG_NAME_FORMAT,
    LOG_INDENT,
    LOGGER_FORMAT,
    PROCESS_LOG_PREFIX,
    REPORT_RANDOM_LENGTH,
)


def setup_logging(log_dir: Path, level: str = "INFO") -> Path:
    """
    Configures loguru for a batch run.

    Replaces any existing sinks with a coloured stderr sink and a process
    log file `process_<timestamp>.log` inside `log_dir`.

    Returns:
        The path of the process log file.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    process_log_path = log_dir / f"{PROCESS_LOG_PREFIX}_{datetime.now():%Y%m%d_%H%M%S}.log"

    logger.remove()
    logger.add(sys.stderr, level=level, format=LOGGER_FORMAT)
    logger.add(
        process_log_path,
        level="DEBUG",
        format=FILE_LOGGER_FORMAT,
        encoding="utf-8",
    )
    return process_log_path


class JobLog:
    """
    Per-file log, mirrored into the process log.

    The per-file sink only accepts records bound to this log's key, so other
    files' lines and general process messages never reach it. Use it as a
    context manager so the sink is removed even when processing stops early.
    Without a log directory only the process log receives the lines.

    Usage:
        with JobLog(run_dir, index, job.file_name) as job_log:
            with job_log.section("FILE COMPARISON"):
                job_log.info("Length difference: 0 seconds")
    """

    def __init__(self, log_dir: Optional[Path], index: int, file_name: str):
        self.file_name = file_name
        self.path: Optional[Path] = None
        self._indent = 0
        self._sink_id: Optional[int] = None
        self._key = f"{index}:{file_name}"
        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            self.path = log_dir / JOB_LOG_NAME_FORMAT.format(index=index)
            self._key = str(self.path)
            self._sink_id = logger.add(
                self.path,
                level="DEBUG",
                format=FILE_LOGGER_FORMAT,
                filter=lambda record: record["extra"].get("job_log") == self._key,
                encoding="utf-8",
            )
        self._logger = logger.bind(job_log=self._key)

    def __enter__(self) -> "JobLog":
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def log(self, level: str, message: str):
        self._logger.opt(depth=2).log(level, f"{LOG_INDENT * self._indent}{message}")

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def success(self, message: str):
        self.log("SUCCESS", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    @contextmanager
    def section(self, title: str):
        self.log("INFO", title)
        self._indent += 1
        try:
            yield self
        finally:
            self._indent -= 1

    def close(self):
        if self._sink_id is not None:
            logger.remove(self._sink_id)
            self._sink_id = None


class Log:
    """Base class for the plain files written to the log folder."""

    linesep_marker: str = "=" * 50

    def __init__(self, log_dir: Path):
        self.log_file_path: Path
        self.log_dir: Path = log_dir.resolve()
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def write(self, log_content: Union[dict, list, str]):
        raise NotImplementedError("Subclasses must implement the write() method.")

    @staticmethod
    def generate_random_string(length: int = REPORT_RANDOM_LENGTH) -> str:
        return "".join(random.choices(string.ascii_uppercase + string.digits, k=length))


class ErrorLog(Log):
    """
    Appends human-readable error entries to `error.txt`.

    Each entry is a block of lines followed by a separator line, so the file
    reads as a chronological record of aborts across runs.
    """

    def __init__(self, error_log_dir: Path, filename: str = ERROR_LOG_FILE_NAME):
        super().__init__(error_log_dir)
        self.log_file_path = self.log_dir / filename

    def write(self, *error_messages: str):
        if not error_messages:
            return

        content_to_write = "\n".join(error_messages) + "\n" + self.linesep_marker + "\n"
        try:
            with self.log_file_path.open("a", encoding="utf-8") as f:
                f.write(content_to_write)
        except OSError as e:
            # Keep the messages in the process log if the file cannot be written.
            logger.error(f"Failed to write to error log {self.log_file_path}: {e}")
            for msg in error_messages:
                logger.error(f"  - {msg}")


class BatchReport(Log):
    """
    Structured YAML report of one batch run.

    The file is named `report_<date>_<random>.yaml` so concurrent or repeated
    runs on the same day never share a file. Each `write` re-reads the file
    and rewrites the full list, keeping the YAML valid after every entry.
    """

    def __init__(self, report_dir: Path):
        super().__init__(report_dir)
        date_str = datetime.now().strftime("%Y%m%d")
        self.log_file_path = self.log_dir / f"report_{date_str}_{self.generate_random_string()}.yaml"
        self.log_entries: List[Dict] = []

    def write(self, new_log_entry: dict):
        if not isinstance(new_log_entry, dict):
            logger.error("BatchReport.write expects a dictionary as a log entry.")
            return

        if self.log_file_path.is_file():
            try:
                with self.log_file_path.open("r", encoding="utf-8") as f:
                    loaded_entries = yaml.safe_load(f)
                if isinstance(loaded_entries, list):
                    self.log_entries = loaded_entries
                else:
                    self.log_entries = []
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Error reading batch report {self.log_file_path}: {e}. Starting a new report.")
                self.log_entries = []

        new_log_entry["index"] = len(self.log_entries) + 1
        self.log_entries.append(new_log_entry)

        try:
            with self.log_file_path.open("w", encoding="utf-8") as f:
                yaml.dump(
                    self.log_entries,
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                    indent=4,
                    width=220,
                )
        except OSError as e:
            logger.error(f"Failed to write batch report {self.log_file_path}: {e}")


class BatchLogs:
    """
    The log files of one batch run, rooted in the configured log folder.

    Per-file logs go to a `batch_<timestamp>` subfolder so file indices of
    different runs never collide; the report and error log sit at the top.
    """

    def __init__(self, log_folder: Path):
        self.log_folder = log_folder.resolve()
        self.run_dir = self.log_folder / f"batch_{datetime.now():%Y%m%d_%H%M%S}"
        self.report = BatchReport(self.log_folder)
        self.error_log = ErrorLog(self.log_folder)

    def job_log(self, index: int, file_name: str) -> JobLog:
        return JobLog(self.run_dir, index, file_name)
