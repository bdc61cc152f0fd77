"""
Defines custom exception types for hevc_batch.

Only two families of failures are expressed as exceptions. `StartupFailure`
covers everything that makes a batch impossible to start (bad settings, a
missing source folder, missing FFmpeg tools) and is the only exception that
reaches the command-line entry point. `MediaFileException` covers media
inspection failures; the verifier absorbs these and fails closed.

Encode failures and relocation failures are not exceptions:
they are reported through return values and handled at file granularity.

All custom exceptions inherit from the base `HevcBatchException`.
"""


class HevcBatchException(Exception):
    """Base class for all custom exceptions in hevc_batch."""

    pass


# --- Startup Exceptions ---
class StartupFailure(HevcBatchException):
    """
    Raised when the batch cannot start.

    Raised before any file is touched: the settings file is unusable, the
    source folder is missing or unreadable, the destination folder cannot be
    written, or the two folders are the same directory.
    """

    pass


class ConfigurationException(StartupFailure):
    """Raised when the settings file is malformed or holds invalid values."""

    pass


class ExternalToolException(StartupFailure):
    """Raised when ffmpeg or ffprobe cannot be found or executed."""

    pass


# --- Media Inspection Exceptions ---
class MediaFileException(HevcBatchException):
    """
    Base class for exceptions related to media file analysis (probing with ffprobe).
    """

    pass


class NoDurationFoundException(MediaFileException):
    """
    Raised when a positive duration cannot be obtained for a media file.

    The verifier compares durations to decide whether an encode is faithful,
    so a file without a determinable duration cannot be verified.
    """

    pass
