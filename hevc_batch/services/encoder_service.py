"""
Encoder invoker: runs the external encoder against one input file.

The invoker builds the output path, runs the encoder synchronously and
reports the exit code. It never interprets the exit code or inspects the
output file; that is the verifier's job.
"""
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..config.common import (
    ENCODER_LAUNCH_FAILED_EXIT_CODE,
    FFMPEG_OUTPUT_ARGS_TEMPLATE,
    FFMPEG_PRE_INPUT_ARGS,
    OUTPUT_EXTENSION,
)
from ..config.settings import BatchConfig
from ..domain.models import EncodeResult, FileJob
from ..utils.ffmpeg_utils import display_command, executable_path, run_cmd
from ..utils.format_utils import format_timedelta
from .logging_service import JobLog

PROCESS_OUTPUT_TAIL_LINES = 200


def encoded_output_path(job: FileJob, config: BatchConfig) -> Path:
    """`<source_folder>/<stem>_<suffix>.mp4`, always beside the source."""
    return config.source_folder / f"{job.stem}_{config.output_suffix}{OUTPUT_EXTENSION}"


class EncoderInvoker:
    def encode(self, job: FileJob, config: BatchConfig, job_log: Optional[JobLog] = None) -> EncodeResult:
        raise NotImplementedError("Subclasses must implement encode().")


class FFmpegEncoder(EncoderInvoker):
    """
    HEVC NVENC encoder at constant QP, video and audio streams mapped,
    metadata kept, audio copied, `+faststart` MP4 output.
    """

    def __init__(self, ffmpeg_dir: Optional[Path] = None):
        self.ffmpeg_cmd = executable_path("ffmpeg", ffmpeg_dir)

    def build_command(self, input_path: Path, output_path: Path, codec_quality: int) -> List[str]:
        output_args = [arg.format(qp=codec_quality) for arg in FFMPEG_OUTPUT_ARGS_TEMPLATE]
        return [
            self.ffmpeg_cmd,
            *FFMPEG_PRE_INPUT_ARGS,
            "-i", str(input_path),
            *output_args,
            str(output_path),
        ]

    def encode(self, job: FileJob, config: BatchConfig, job_log: Optional[JobLog] = None) -> EncodeResult:
        output_path = encoded_output_path(job, config)
        cmd_list = self.build_command(job.path, output_path, config.codec_quality)

        logger.info(f"Started compression of file [{job.path}]")
        if job_log:
            job_log.debug(f"Command: {display_command(cmd_list)}")

        started = datetime.now()
        result = run_cmd(
            cmd_list,
            capture_output=not config.show_process_window,
            hide_window=not config.show_process_window,
        )
        elapsed = datetime.now() - started

        if result is None:
            exit_code = ENCODER_LAUNCH_FAILED_EXIT_CODE
        else:
            exit_code = result.returncode
            if job_log and result.stderr:
                with job_log.section("--- PROCESS OUTPUT ---"):
                    # Progress lines are noise; the tail holds the summary and any errors.
                    for line in result.stderr.splitlines()[-PROCESS_OUTPUT_TAIL_LINES:]:
                        job_log.debug(line)

        logger.info(
            f"Finished compression of file [{job.path}] with exit code {exit_code} "
            f"in {format_timedelta(elapsed)}"
        )
        return EncodeResult(
            output_path=output_path,
            process_exit_code=exit_code,
            command=cmd_list,
            elapsed=elapsed,
        )
