"""
Domain layer of hevc_batch.

Modules:
    exceptions.py: the exception hierarchy (`StartupFailure`,
                   `MediaFileException` and their subclasses).
    models.py: per-file values (`FileJob`, `EncodeResult`,
               `VerificationOutcome`) and per-run state (`BatchState`,
               `BatchSummary`).
    media.py: the `MediaInspector` interface and its ffprobe implementation.
"""
