"""
Command-line entry point for hevc_batch.

The program takes no arguments: everything is driven by the settings file
(`settings.yaml` in the working directory, or the file named by the
HEVC_BATCH_SETTINGS environment variable).

Exit status is 0 for every run that got past startup, including a batch that
was aborted early by a duration mismatch, and 1 when the batch could not
start at all.
"""
import sys

from loguru import logger

from . import __version__
from .config.common import LOGGER_FORMAT
from .config.settings import SettingsProvider, log_settings
from .domain.exceptions import StartupFailure
from .pipeline.batch_pipeline import PipelineController, format_summary
from .services.logging_service import setup_logging
from .utils.tool_check import verify_ffmpeg_tools

EXIT_OK = 0
EXIT_STARTUP_FAILURE = 1


def main() -> int:
    """
    Runs one batch.

    1. Loads and validates the settings (a default file is created on first run).
    2. Switches logging to the configured log folder.
    3. Verifies that ffmpeg and ffprobe can be executed.
    4. Runs the pipeline controller and logs the terminal summary.
    """
    logger.remove()
    logger.add(sys.stderr, level="INFO", format=LOGGER_FORMAT)

    try:
        config = SettingsProvider().load()
        process_log_path = setup_logging(config.log_folder)
        logger.info(f"Preparing hevc_batch ({__version__})...")
        logger.info(f"Process log: {process_log_path}")
        log_settings(config)
        verify_ffmpeg_tools(config.ffmpeg_dir)

        controller = PipelineController(config)
        summary = controller.run_batch()
    except StartupFailure as e:
        logger.critical(f"Startup failed: {e}")
        return EXIT_STARTUP_FAILURE

    if summary.completed:
        logger.success(format_summary(summary))
    else:
        logger.warning(format_summary(summary))
    logger.info("Program has finished")
    return EXIT_OK


def run():
    sys.exit(main())
