"""
Common configuration constants used throughout hevc_batch.

This module centralizes the parameters that are fixed for every batch run:
logging formats, the names of the files the application writes, the FFmpeg
command template and the default values of the on-disk settings file.
Per-run values live in `settings.yaml` and are loaded by
`hevc_batch.config.settings`.
"""
import os
from pathlib import Path

# --- Settings File ---

# Name of the settings file looked up in the working directory. The
# HEVC_BATCH_SETTINGS environment variable points to a different file.
SETTINGS_FILE_NAME = "settings.yaml"
SETTINGS_ENV_VAR = "HEVC_BATCH_SETTINGS"

# Values written to a freshly created settings file on first run. Relative
# folders are resolved against the directory holding the settings file.
DEFAULT_SETTINGS = {
    "source_folder": "input",
    "destination_folder": "output",
    "cqp": 24,
    "suffix": "hevc",
    "ignored_files": [],
    "delete_source": False,
    "delete_permanently": False,
    "show_process_window": False,
    "duration_tolerance": 0.0,
    "ffmpeg_dir": None,
    "log_folder": "_logs",
}


def default_settings_path() -> Path:
    """Returns the settings file path, honouring the environment override."""
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return Path(override).expanduser().resolve()
    return (Path.cwd() / SETTINGS_FILE_NAME).resolve()


# --- Logging Configuration ---

# Console format for the loguru stderr sink.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

# Plain format for the process-wide and per-file log files.
FILE_LOGGER_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"

# Prefix of the process-wide log file; a timestamp is appended per run.
PROCESS_LOG_PREFIX = "process"

# Per-file log files are named after the file's position in the batch.
JOB_LOG_NAME_FORMAT = "file_{index:04d}.log"

# Indentation unit used by per-file log sections.
LOG_INDENT = "    "

# Batch reports are YAML files named `report_<date>_<random>.yaml`.
REPORT_RANDOM_LENGTH = 10

# Human-readable abort evidence is appended to this file in the log folder.
ERROR_LOG_FILE_NAME = "error.txt"


# --- Encoding Rules ---

# Container extension of every encoded output.
OUTPUT_EXTENSION = ".mp4"

# Suffix of the temporary copy made beside the source before relocation.
TEMP_COPY_SUFFIX = "_TEMP"

# Rough throughput of the NVENC encoder, in MB of source per second. Only
# used to log an estimated compression time.
ESTIMATED_MB_PER_SECOND = 360.0

# Exit code reported when the encoder process could not be started at all.
ENCODER_LAUNCH_FAILED_EXIT_CODE = -1

# FFmpeg arguments placed between the input and the output path. `{qp}` is
# replaced with the configured codec quality.
FFMPEG_PRE_INPUT_ARGS = ["-hwaccel_output_format", "cuda"]
FFMPEG_OUTPUT_ARGS_TEMPLATE = [
    "-map", "0:v",
    "-map", "0:a",
    "-map_metadata", "0",
    "-c:v", "hevc_nvenc",
    "-rc", "constqp",
    "-qp", "{qp}",
    "-b:v", "0K",
    "-c:a", "copy",
    "-movflags", "+faststart",
    "-movflags", "use_metadata_tags",
    "-y",
]
