"""
This package contains the pipeline controller of hevc_batch.

The controller discovers files in the source folder and drives each of them
through the encoder invoker and the verifier, applying the batch-wide abort
policy between files.
"""
