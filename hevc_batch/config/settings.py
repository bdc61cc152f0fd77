"""
Settings provider for hevc_batch.

Loads the immutable `BatchConfig` snapshot for one batch run from a YAML
settings file. On first run the file does not exist yet; a default one is
written and then loaded, so the operator only has to edit the folders.

Relative folder paths in the file are resolved against the directory that
contains the settings file, which keeps a settings file portable together
with its input and output folders.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, FrozenSet, Optional

import yaml
from loguru import logger

from ..domain.exceptions import ConfigurationException, StartupFailure
from .common import DEFAULT_SETTINGS, default_settings_path


@dataclass(frozen=True)
class BatchConfig:
    """
    Immutable configuration snapshot for one batch run.

    Attributes:
        source_folder: Folder scanned for input files. Encoded outputs are
            written beside the sources in this folder.
        destination_folder: Folder receiving accepted encodes as `<stem>.mp4`.
        codec_quality: Constant QP passed to the HEVC encoder.
        output_suffix: Suffix of the encoded artifact, `<stem>_<suffix>.mp4`.
        ignored_file_names: Exact file names that are never encoded.
        delete_source: Delete the original after an accepted encode.
        delete_permanently: False sends deleted files to the trash.
        show_process_window: Let the encoder write to the console.
        duration_tolerance: Maximum accepted duration difference in seconds.
            0.0 demands exact equality.
        ffmpeg_dir: Directory holding ffmpeg and ffprobe. None uses PATH.
        log_folder: Folder receiving process, per-file and report logs.
    """

    source_folder: Path
    destination_folder: Path
    codec_quality: int = DEFAULT_SETTINGS["cqp"]
    output_suffix: str = DEFAULT_SETTINGS["suffix"]
    ignored_file_names: FrozenSet[str] = field(default_factory=frozenset)
    delete_source: bool = DEFAULT_SETTINGS["delete_source"]
    delete_permanently: bool = DEFAULT_SETTINGS["delete_permanently"]
    show_process_window: bool = DEFAULT_SETTINGS["show_process_window"]
    duration_tolerance: float = DEFAULT_SETTINGS["duration_tolerance"]
    ffmpeg_dir: Optional[Path] = None
    log_folder: Path = Path(DEFAULT_SETTINGS["log_folder"])

    def is_ignored(self, file_name: str) -> bool:
        return file_name in self.ignored_file_names

    def as_dict(self) -> dict:
        """Returns the settings in the shape of the YAML file."""
        return {
            "source_folder": str(self.source_folder),
            "destination_folder": str(self.destination_folder),
            "cqp": self.codec_quality,
            "suffix": self.output_suffix,
            "ignored_files": sorted(self.ignored_file_names),
            "delete_source": self.delete_source,
            "delete_permanently": self.delete_permanently,
            "show_process_window": self.show_process_window,
            "duration_tolerance": self.duration_tolerance,
            "ffmpeg_dir": str(self.ffmpeg_dir) if self.ffmpeg_dir else None,
            "log_folder": str(self.log_folder),
        }


class SettingsProvider:
    """
    Reads, creates and validates the settings file.

    Usage:
        config = SettingsProvider().load()
    """

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path: Path = (settings_path or default_settings_path()).resolve()
        self.base_dir: Path = self.settings_path.parent

    def load(self, validate: bool = True) -> BatchConfig:
        """
        Loads the settings file into a `BatchConfig`.

        Args:
            validate: When True, the folder invariants are checked and the
                destination and log folders are created if missing.

        Raises:
            ConfigurationException: The file cannot be parsed or holds values
                of the wrong type.
            StartupFailure: The folders are unusable.
        """
        if not self.settings_path.is_file():
            self.write_default()

        try:
            with self.settings_path.open("r", encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationException(
                f"Settings file {self.settings_path} is not valid YAML: {e}"
            ) from e
        except OSError as e:
            raise ConfigurationException(
                f"Settings file {self.settings_path} could not be read: {e}"
            ) from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigurationException(
                f"Settings file {self.settings_path} must contain a mapping, got {type(raw).__name__}."
            )

        unknown_keys = set(raw) - set(DEFAULT_SETTINGS)
        if unknown_keys:
            logger.warning(f"Ignoring unknown settings keys: {sorted(unknown_keys)}")

        merged = {**DEFAULT_SETTINGS, **raw}
        config = self._build_config(merged)
        logger.info(f"Successfully retrieved settings from {self.settings_path}")

        if validate:
            validate_folders(config)
        return config

    def write_default(self):
        """Writes a settings file holding the default values."""
        logger.warning(
            f"Settings file {self.settings_path} not found. Creating a default one; "
            "edit it to point at your source and destination folders."
        )
        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            with self.settings_path.open("w", encoding="utf-8") as f:
                yaml.dump(
                    DEFAULT_SETTINGS,
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                )
        except OSError as e:
            raise ConfigurationException(
                f"Could not create default settings file {self.settings_path}: {e}"
            ) from e

    def _resolve_folder(self, value: Any, key: str) -> Path:
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationException(f"Setting '{key}' must be a non-empty path string.")
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = self.base_dir / path
        return path.resolve()

    def _build_config(self, merged: dict) -> BatchConfig:
        codec_quality = merged["cqp"]
        if isinstance(codec_quality, bool) or not isinstance(codec_quality, int):
            raise ConfigurationException(f"Setting 'cqp' must be an integer, got {codec_quality!r}.")
        if not 0 <= codec_quality <= 51:
            raise ConfigurationException(f"Setting 'cqp' must be between 0 and 51, got {codec_quality}.")

        suffix = merged["suffix"]
        if not isinstance(suffix, str) or not suffix:
            raise ConfigurationException(f"Setting 'suffix' must be a non-empty string, got {suffix!r}.")

        ignored = merged["ignored_files"] or []
        if not isinstance(ignored, list) or not all(isinstance(name, str) for name in ignored):
            raise ConfigurationException("Setting 'ignored_files' must be a list of file names.")

        flags = {}
        for key in ("delete_source", "delete_permanently", "show_process_window"):
            if not isinstance(merged[key], bool):
                raise ConfigurationException(f"Setting '{key}' must be true or false, got {merged[key]!r}.")
            flags[key] = merged[key]

        tolerance = merged["duration_tolerance"]
        if isinstance(tolerance, bool) or not isinstance(tolerance, (int, float)) or tolerance < 0:
            raise ConfigurationException(
                f"Setting 'duration_tolerance' must be a non-negative number, got {tolerance!r}."
            )

        ffmpeg_dir = merged["ffmpeg_dir"]
        return BatchConfig(
            source_folder=self._resolve_folder(merged["source_folder"], "source_folder"),
            destination_folder=self._resolve_folder(merged["destination_folder"], "destination_folder"),
            codec_quality=codec_quality,
            output_suffix=suffix,
            ignored_file_names=frozenset(ignored),
            duration_tolerance=float(tolerance),
            ffmpeg_dir=self._resolve_folder(ffmpeg_dir, "ffmpeg_dir") if ffmpeg_dir else None,
            log_folder=self._resolve_folder(merged["log_folder"], "log_folder"),
            **flags,
        )


def validate_folders(config: BatchConfig):
    """
    Checks that the source and destination folders can host a batch.

    The destination and log folders are created when missing. The source
    folder must already exist.

    Raises:
        StartupFailure: Any folder invariant is violated.
    """
    source = config.source_folder
    destination = config.destination_folder

    if not source.is_dir():
        raise StartupFailure(f"Source folder does not exist or is not a directory: {source}")
    if not os.access(source, os.R_OK | os.W_OK | os.X_OK):
        raise StartupFailure(f"Source folder is not readable and writable: {source}")

    try:
        destination.mkdir(parents=True, exist_ok=True)
        config.log_folder.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StartupFailure(f"Could not create destination or log folder: {e}") from e

    if not os.access(destination, os.W_OK | os.X_OK):
        raise StartupFailure(f"Destination folder is not writable: {destination}")
    if source.resolve() == destination.resolve():
        raise StartupFailure(f"Source and destination folders must differ: {source}")


def log_settings(config: BatchConfig):
    """Writes every setting the pipeline consumes to the process log."""
    logger.info("Settings used for this batch:")
    for key, value in config.as_dict().items():
        logger.info(f"    {key}: {value}")
