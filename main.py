"""
Main entry point for hevc_batch.

Encodes every video in the configured source folder to HEVC, verifies each
encode against its original and moves the accepted results to the
destination folder. All behaviour comes from `settings.yaml`.
"""

from hevc_batch.app import run


if __name__ == "__main__":
    run()
