"""
Pipeline controller: drives one batch run.

Files in the source folder are processed strictly one after another. Each
file goes through encode, verify and relocate completely before the next one
starts. The first ABORTED verdict stops the batch: the current file finishes
(its log closes and its report entry is written) and no further file starts.
"""
from datetime import datetime
from typing import List, Optional

from loguru import logger

from ..config.common import ESTIMATED_MB_PER_SECOND
from ..config.settings import BatchConfig
from ..domain.exceptions import StartupFailure
from ..domain.media import FFprobeMediaInspector, MediaInspector
from ..domain.models import BatchState, BatchSummary, EncodeResult, FileJob, VerificationOutcome
from ..services.encoder_service import EncoderInvoker, FFmpegEncoder
from ..services.file_service import FileRelocator
from ..services.logging_service import BatchLogs
from ..services.verification_service import Verifier
from ..utils.format_utils import format_timedelta, formatted_size, size_in_mb


class PipelineController:
    """
    Runs the encode → verify → relocate sequence over a source folder.

    The collaborators default to the FFmpeg-backed implementations; tests
    pass scripted fakes instead.

    Attributes:
        config: The immutable settings snapshot.
        state: Batch-wide flags of the current (or last) run.
    """

    def __init__(
        self,
        config: BatchConfig,
        encoder: Optional[EncoderInvoker] = None,
        inspector: Optional[MediaInspector] = None,
        relocator: Optional[FileRelocator] = None,
        batch_logs: Optional[BatchLogs] = None,
    ):
        self.config = config
        self.encoder = encoder or FFmpegEncoder(config.ffmpeg_dir)
        self.inspector = inspector or FFprobeMediaInspector(config.ffmpeg_dir)
        self.relocator = relocator or FileRelocator()
        self.batch_logs = batch_logs or BatchLogs(config.log_folder)
        self.verifier = Verifier(self.inspector, self.relocator, self.batch_logs.error_log)
        self.state = BatchState(delete_source=config.delete_source)

    def discover_jobs(self) -> List[FileJob]:
        """
        Lists the files directly inside the source folder, sorted by name.

        Sorting makes the set of files processed before an abort the same on
        every run. Subdirectories are not descended into.

        Raises:
            StartupFailure: The source folder cannot be listed.
        """
        source = self.config.source_folder
        try:
            entries = sorted(source.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise StartupFailure(f"Could not enumerate source folder {source}: {e}") from e

        jobs = []
        for entry in entries:
            try:
                if not entry.is_file():
                    continue
                jobs.append(FileJob.from_path(entry))
            except OSError as e:
                logger.warning(f"Skipping {entry.name}, it could not be read: {e}")
        return jobs

    def run_batch(self) -> BatchSummary:
        self.state = BatchState(delete_source=self.config.delete_source)
        summary = BatchSummary()

        jobs = self.discover_jobs()
        total_size = formatted_size(sum(job.size for job in jobs))
        logger.info(f"Found {len(jobs)} file(s) ({total_size}) in {self.config.source_folder}")

        for index, job in enumerate(jobs):
            if not self.state.continue_processing:
                break

            logger.info(f"-----[{job.file_name}]-----")
            logger.info(f"Loaded file {job.file_name}")

            if self.config.is_ignored(job.file_name):
                logger.info(f"File {job.file_name} is in ignored files list. Skipping...")
                summary.skipped += 1
                continue

            outcome = self.process_file(index, job)
            summary.record(job, outcome)

            if outcome.is_aborted:
                self.state.mark_aborted()
                remaining = len(jobs) - index - 1
                logger.error(f"Batch aborted after {job.file_name}; {remaining} remaining file(s) not processed.")

        summary.completed = self.state.continue_processing
        if summary.completed:
            logger.info("All files have finished processing.")
        return summary

    def process_file(self, index: int, job: FileJob) -> VerificationOutcome:
        """Encodes and verifies one file with its own log."""
        started = datetime.now()
        with self.batch_logs.job_log(index, job.file_name) as job_log:
            job_log.info(f"-----[{job.file_name}]-----")
            job_log.info(f"File size: {size_in_mb(job.size)} MB")
            estimate = size_in_mb(job.size) / ESTIMATED_MB_PER_SECOND
            job_log.info(f"Estimated compression time: {round(estimate, 2)} seconds")

            result = self.encoder.encode(job, self.config, job_log)
            job_log.info(
                f"Encoder finished with exit code {result.process_exit_code} "
                f"after {format_timedelta(result.elapsed)}"
            )

            outcome = self.verifier.verify(job, result, self.config, self.state, job_log)
            job_log.info(f"Verdict: {outcome.verdict.name} ({outcome.reason})")
            job_log.info("File has finished processing")

        self._write_report_entry(job, result, outcome, started)
        return outcome

    def _write_report_entry(
        self, job: FileJob, result: EncodeResult, outcome: VerificationOutcome, started: datetime
    ):
        self.batch_logs.report.write(
            {
                "file_name": job.file_name,
                "original_path": str(job.path),
                "encoded_path": str(result.output_path),
                "verdict": outcome.verdict.value,
                "reason": outcome.reason,
                "exit_code": result.process_exit_code,
                "duration_delta_seconds": outcome.duration_delta,
                "original_size_bytes": job.size,
                "size_delta_bytes": outcome.size_delta,
                "size_percentage": outcome.size_percentage,
                "artifact_retained": outcome.artifact_retained,
                "codec_quality": self.config.codec_quality,
                "encode_time": format_timedelta(result.elapsed),
                "started_datetime": started.isoformat(timespec="seconds"),
                "ended_datetime": datetime.now().isoformat(timespec="seconds"),
            }
        )


def run_batch(config: BatchConfig, **collaborators) -> BatchSummary:
    """Runs one batch with a fresh controller; see `PipelineController`."""
    return PipelineController(config, **collaborators).run_batch()


def format_summary(summary: BatchSummary) -> str:
    status = "completed" if summary.completed else "aborted early"
    return (
        f"Batch {status}: {summary.accepted} accepted, {summary.rejected} rejected, "
        f"{summary.aborted} aborted, {summary.skipped} skipped."
    )
