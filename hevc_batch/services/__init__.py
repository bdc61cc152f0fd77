"""
Services package for hevc_batch.

- **Encoder Invoker (`FFmpegEncoder`):** runs FFmpeg on one input file and
  reports the exit code and output path.
- **Verifier (`Verifier`):** compares the encode with its original and
  decides ACCEPTED, REJECTED or ABORTED, applying the matching file
  management in the same step.
- **File Relocator (`FileRelocator`):** copy, move and delete operations that
  report success as booleans.
- **Logging (`setup_logging`, `JobLog`, `BatchReport`, `ErrorLog`):** the
  process log, per-file logs, the YAML batch report and the abort error log.
"""
