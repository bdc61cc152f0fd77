"""
hevc_batch: a batch HEVC transcoding pipeline.

The package scans a source folder, encodes every video it finds with FFmpeg,
verifies that the encode reproduced the source faithfully, and relocates the
accepted results into a destination folder.

Layout:
    config/: constants and the settings provider (`settings.yaml`).
    domain/: data models, exceptions and media inspection.
    services/: encoder invoker, verifier, file relocator and log sinks.
    pipeline/: the pipeline controller that drives one batch run.
    utils/: subprocess runner, formatting helpers, external tool checks.
"""

__version__ = "1.0.0"
