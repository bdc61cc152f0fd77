"""
Media inspection: playable duration and byte size of a file.

The verifier depends on the `MediaInspector` interface only, so tests can
substitute scripted durations. `FFprobeMediaInspector` is the production
implementation and uses `ffprobe` through the ffmpeg-python library.
"""
import re
from pathlib import Path
from pprint import pformat
from typing import Optional

import ffmpeg
from loguru import logger

from .exceptions import MediaFileException, NoDurationFoundException
from ..utils.ffmpeg_utils import executable_path


def parse_duration(duration_str: str) -> float:
    """
    Parses a duration string into total seconds.

    Handles the two formats ffprobe produces:
    1. A plain floating-point number of seconds (e.g., "3600.5").
    2. A timecode 'HH:MM:SS.sss' (e.g., "01:00:00.500"); hours are optional.

    Returns:
        The total duration in seconds, or 0.0 if parsing fails.
    """
    try:
        return float(duration_str)
    except ValueError:
        pattern = r"(?:(\d{1,2}):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)"
        match = re.fullmatch(pattern, duration_str)
        if match:
            hours_str, minutes_str, seconds_str = match.groups()
            hours = int(hours_str) if hours_str else 0
            minutes = int(minutes_str)
            seconds = float(seconds_str)
            return float(hours * 3600 + minutes * 60 + seconds)
        logger.warning(f"Could not parse duration string: {duration_str}")
    return 0.0


class MediaInspector:
    """Reports a file's playable duration and byte size."""

    def duration(self, path: Path) -> float:
        """
        Returns the playable duration of `path` in seconds.

        Raises:
            MediaFileException: The file is missing, unreadable or corrupt.
            NoDurationFoundException: No positive duration could be determined.
        """
        raise NotImplementedError("Subclasses must implement duration().")

    def size(self, path: Path) -> int:
        try:
            return path.stat().st_size
        except OSError as e:
            raise MediaFileException(f"Could not read size of {path}: {e}") from e


class FFprobeMediaInspector(MediaInspector):
    """
    Media inspector backed by `ffprobe`.

    The duration is read from the 'format' section first, then from the
    first stream that carries one, and as a last resort calculated from the
    video stream's frame count and average frame rate.
    """

    def __init__(self, ffmpeg_dir: Optional[Path] = None):
        self.ffprobe_cmd = executable_path("ffprobe", ffmpeg_dir)

    def probe(self, path: Path) -> dict:
        if not path.is_file():
            raise MediaFileException(f"Media file not found: {path}")
        try:
            probe = ffmpeg.probe(str(path), cmd=self.ffprobe_cmd)
        except ffmpeg.Error as e:
            stderr = e.stderr.decode("utf-8", errors="replace") if e.stderr else ""
            logger.error(f"ffprobe failed for {path}: {stderr}")
            raise MediaFileException(f"Failed to probe media file {path}: {stderr}") from e
        except OSError as e:
            raise MediaFileException(f"Could not run {self.ffprobe_cmd} on {path}: {e}") from e
        logger.trace(f"Probe data for {path.name}:\n{pformat(probe)}")
        return probe

    def duration(self, path: Path) -> float:
        probe = self.probe(path)

        duration_val = probe.get("format", {}).get("duration")
        if not duration_val:
            for stream in probe.get("streams", []):
                if "duration" in stream:
                    duration_val = stream["duration"]
                    break

        if duration_val is not None:
            duration = parse_duration(str(duration_val))
        else:
            logger.warning(
                f"Primary 'duration' key not found for {path.name}. Trying to calculate from video stream."
            )
            duration = _duration_from_video_stream(probe)

        if duration <= 0:
            raise NoDurationFoundException(f"No valid (positive) duration found for {path}")
        logger.debug(f"Duration for {path.name}: {duration}s")
        return duration


def _duration_from_video_stream(probe: dict) -> float:
    video_stream = next(
        (s for s in probe.get("streams", []) if s.get("codec_type") == "video"), None
    )
    if not video_stream:
        return 0.0

    nb_frames_str = video_stream.get("nb_frames")
    avg_frame_rate_str = video_stream.get("avg_frame_rate")
    if not nb_frames_str or not avg_frame_rate_str or avg_frame_rate_str == "0/0":
        return 0.0

    try:
        nb_frames = int(nb_frames_str)
        num, den = map(int, avg_frame_rate_str.split("/"))
    except ValueError as e:
        logger.warning(f"Could not parse nb_frames/avg_frame_rate: {e}")
        return 0.0
    if den == 0 or num <= 0 or nb_frames <= 0:
        return 0.0
    return nb_frames / (num / den)
