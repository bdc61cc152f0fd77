"""
Verifier: compares an encode against its original and manages the files.

The verdict and the file management that follows it are one step from the
controller's point of view:

- The encoder exited with an error: REJECTED, the partial output is removed.
- The playable durations differ (or cannot be measured): ABORTED. Both files
  are left untouched for manual inspection and the controller stops the batch.
- The encode is not smaller than the original: REJECTED, the encode is removed.
- The encode is smaller: the original is optionally deleted and the encode is
  relocated to the destination folder. If relocation fails the encode stays
  beside the source and source deletion is disabled for the rest of the batch.

Only a duration mismatch escalates beyond the current file. Every relocation
step is independently fallible and only logged.
"""
from pathlib import Path
from typing import Optional

from loguru import logger

from ..config.common import OUTPUT_EXTENSION, TEMP_COPY_SUFFIX
from ..config.settings import BatchConfig
from ..domain.exceptions import MediaFileException
from ..domain.media import MediaInspector
from ..domain.models import BatchState, EncodeResult, FileJob, VerificationOutcome, Verdict
from ..utils.format_utils import size_in_mb, size_percentage
from .file_service import FileRelocator
from .logging_service import ErrorLog, JobLog


def temp_copy_path(encoded: Path) -> Path:
    """`<encoded stem>_TEMP<ext>` beside the encoded file."""
    return encoded.with_name(f"{encoded.stem}{TEMP_COPY_SUFFIX}{encoded.suffix}")


def destination_path(job: FileJob, config: BatchConfig) -> Path:
    return config.destination_folder / f"{job.stem}{OUTPUT_EXTENSION}"


class Verifier:
    def __init__(
        self,
        inspector: MediaInspector,
        relocator: FileRelocator,
        error_log: Optional[ErrorLog] = None,
    ):
        self.inspector = inspector
        self.relocator = relocator
        self.error_log = error_log

    def verify(
        self,
        job: FileJob,
        result: EncodeResult,
        config: BatchConfig,
        state: BatchState,
        job_log: Optional[JobLog] = None,
    ) -> VerificationOutcome:
        """
        Decides the verdict for one encode and applies the matching file management.

        Args:
            job: The original file.
            result: What the encoder reported.
            config: The batch settings snapshot.
            state: Batch-wide flags; `delete_source` is read and may be
                downgraded here.
            job_log: The per-file log. Lines go to the process log only
                when omitted.
        """
        job_log = job_log or JobLog(None, 0, job.file_name)

        if not result.succeeded:
            return self._reject_failed_encode(job, result, config, job_log)

        with job_log.section("FILE COMPARISON"):
            duration_delta = self._duration_delta(job.path, result.output_path, job_log)
            # NaN compares false and fails closed.
            if duration_delta is None or not duration_delta <= config.duration_tolerance:
                return self._abort(job, result, duration_delta, job_log)

            try:
                original_size = self.inspector.size(job.path)
                encoded_size = self.inspector.size(result.output_path)
            except MediaFileException as e:
                job_log.error(f"Could not read file sizes: {e}")
                return VerificationOutcome(
                    verdict=Verdict.REJECTED,
                    duration_delta=duration_delta,
                    reason=f"File sizes unreadable: {e}",
                    artifact_retained=result.output_path.exists(),
                )

            size_delta = original_size - encoded_size
            percentage = size_percentage(encoded_size, original_size)
            job_log.info(f"Original file size: {size_in_mb(original_size)} MB")
            job_log.info(f"Encoded file size: {size_in_mb(encoded_size)} MB")
            job_log.info(f"Size difference: {size_in_mb(abs(size_delta))} MB")
            if percentage is not None:
                job_log.info(f"Percentage of original file size: {percentage}%")

        with job_log.section("FILE MANAGEMENT"):
            if encoded_size < original_size:
                job_log.info("Encoded file is smaller than the original file")
                outcome = self._accept(job, result, config, state, job_log)
            else:
                job_log.info("Encoded file is not smaller than the original file")
                if self.relocator.delete(result.output_path, config.delete_permanently):
                    job_log.info("Deleted encoded file")
                else:
                    job_log.warning("Failed to delete encoded file")
                outcome = VerificationOutcome(
                    verdict=Verdict.REJECTED,
                    reason="Encoded file is not smaller than the original",
                    artifact_retained=result.output_path.exists(),
                )

        job_log.info("File comparison finished")
        return VerificationOutcome(
            verdict=outcome.verdict,
            duration_delta=duration_delta,
            size_delta=size_delta,
            size_percentage=percentage,
            reason=outcome.reason,
            artifact_retained=outcome.artifact_retained,
        )

    def _duration_delta(self, original: Path, encoded: Path, job_log: JobLog) -> Optional[float]:
        """Absolute duration difference in seconds, or None if either side is unreadable."""
        try:
            original_duration = self.inspector.duration(original)
            encoded_duration = self.inspector.duration(encoded)
        except MediaFileException as e:
            job_log.error(f"Could not measure durations: {e}")
            return None
        delta = abs(original_duration - encoded_duration)
        job_log.info(f"Original duration: {original_duration} seconds")
        job_log.info(f"Encoded duration: {encoded_duration} seconds")
        job_log.info(f"Length difference: {delta} seconds")
        return delta

    def _reject_failed_encode(
        self, job: FileJob, result: EncodeResult, config: BatchConfig, job_log: JobLog
    ) -> VerificationOutcome:
        job_log.error(f"Encoder exited with code {result.process_exit_code}. No usable output for {job.file_name}.")
        retained = False
        if result.output_path.exists():
            if self.relocator.delete(result.output_path, config.delete_permanently):
                job_log.info("Deleted partial encoded file")
            else:
                job_log.warning("Failed to delete partial encoded file")
                retained = True
        return VerificationOutcome(
            verdict=Verdict.REJECTED,
            reason=f"Encoder exited with code {result.process_exit_code}",
            artifact_retained=retained,
        )

    def _abort(
        self, job: FileJob, result: EncodeResult, duration_delta: Optional[float], job_log: JobLog
    ) -> VerificationOutcome:
        if duration_delta is None:
            reason = "Duration could not be measured"
        else:
            reason = f"Duration mismatch of {duration_delta} seconds"
        job_log.error(f"Failed to complete encoding ({reason}). Dropping all other files.")
        job_log.error(f"Preserved for inspection: {job.path} and {result.output_path}")
        if self.error_log:
            self.error_log.write(
                f"Batch aborted while processing: {job.file_name}",
                f"Reason: {reason}",
                f"Original file: {job.path}",
                f"Encoded file: {result.output_path}",
            )
        return VerificationOutcome(
            verdict=Verdict.ABORTED,
            duration_delta=duration_delta,
            reason=reason,
            artifact_retained=result.output_path.exists(),
        )

    def _accept(
        self,
        job: FileJob,
        result: EncodeResult,
        config: BatchConfig,
        state: BatchState,
        job_log: JobLog,
    ) -> VerificationOutcome:
        encoded = result.output_path

        if state.delete_source:
            if self.relocator.delete(job.path, config.delete_permanently):
                job_log.info("Deleted original file")
            else:
                job_log.warning("Failed to delete original file")

        temp_copy = temp_copy_path(encoded)
        target = destination_path(job, config)

        copied = self.relocator.copy(encoded, temp_copy, overwrite=False)
        if not copied:
            job_log.warning(f"Failed to copy encoded file to {temp_copy.name}")
        moved = copied and self.relocator.move(temp_copy, target, overwrite=False)

        if not moved:
            job_log.error("Failed to move encoded file to destination folder. Assuming destination drive is full.")
            if copied and temp_copy.exists() and not self.relocator.delete(temp_copy, permanently=True):
                job_log.warning(f"Failed to remove temporary copy {temp_copy.name}")
            if state.delete_source:
                logger.warning("Source deletion disabled for the rest of this batch.")
            state.downgrade_delete_source()
            return VerificationOutcome(
                verdict=Verdict.REJECTED,
                reason="Encoded file could not be moved to the destination folder",
                artifact_retained=True,
            )

        job_log.success(f"Moved encoded file to destination folder as {target.name}")
        if self.relocator.delete(encoded, config.delete_permanently):
            job_log.info("Deleted encoded file copy")
        else:
            job_log.warning("Failed to delete encoded file copy")
        return VerificationOutcome(verdict=Verdict.ACCEPTED, reason="Encoded file is smaller than the original")
