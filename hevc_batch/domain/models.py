"""
Data models for a batch run.

`FileJob`, `EncodeResult` and `VerificationOutcome` are immutable values
created and consumed once per file. `BatchState` is the only state shared
across file iterations; each controller run owns its own instance.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional


@dataclass(frozen=True)
class FileJob:
    """One discovered input file, captured at enumeration time."""

    path: Path
    file_name: str
    size: int

    @classmethod
    def from_path(cls, path: Path) -> "FileJob":
        resolved = path.resolve()
        return cls(path=resolved, file_name=resolved.name, size=resolved.stat().st_size)

    @property
    def stem(self) -> str:
        return self.path.stem


@dataclass(frozen=True)
class EncodeResult:
    """
    What the encoder invoker reports for one file.

    The exit code is not interpreted by the invoker; `succeeded` is a
    convenience for the verifier.
    """

    output_path: Path
    process_exit_code: int
    command: List[str] = field(default_factory=list)
    elapsed: timedelta = timedelta(0)

    @property
    def succeeded(self) -> bool:
        return self.process_exit_code == 0


class Verdict(Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    ABORTED = "aborted"


@dataclass(frozen=True)
class VerificationOutcome:
    """
    The verifier's decision for one file.

    Attributes:
        verdict: ACCEPTED, REJECTED or ABORTED.
        duration_delta: Absolute duration difference in seconds, or None when
            it could not be measured.
        size_delta: Original size minus encoded size in bytes, or None when
            the size comparison was not reached.
        size_percentage: Encoded size as a percentage of the original.
        reason: Short human-readable explanation of the verdict.
        artifact_retained: True when the encoded output was kept beside the
            source because it could not be relocated.
    """

    verdict: Verdict
    duration_delta: Optional[float] = None
    size_delta: Optional[int] = None
    size_percentage: Optional[float] = None
    reason: str = ""
    artifact_retained: bool = False

    @property
    def is_aborted(self) -> bool:
        return self.verdict is Verdict.ABORTED


@dataclass
class BatchState:
    """
    Batch-wide mutable flags.

    `continue_processing` goes false permanently on the first abort.
    `delete_source` starts from the settings and is downgraded to False for
    the rest of the run once a relocation fails.
    """

    continue_processing: bool = True
    delete_source: bool = False

    def mark_aborted(self):
        self.continue_processing = False

    def downgrade_delete_source(self):
        self.delete_source = False


@dataclass
class BatchSummary:
    accepted: int = 0
    rejected: int = 0
    aborted: int = 0
    skipped: int = 0
    completed: bool = True
    outcomes: Dict[str, VerificationOutcome] = field(default_factory=dict)

    @property
    def processed(self) -> int:
        return self.accepted + self.rejected + self.aborted

    def record(self, job: FileJob, outcome: VerificationOutcome):
        self.outcomes[job.file_name] = outcome
        if outcome.verdict is Verdict.ACCEPTED:
            self.accepted += 1
        elif outcome.verdict is Verdict.REJECTED:
            self.rejected += 1
        else:
            self.aborted += 1
            self.completed = False
