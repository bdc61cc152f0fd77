"""
Configuration package for hevc_batch.

`common.py` holds the static constants (log formats, file naming rules, the
FFmpeg command template), while `settings.py` loads the per-run settings
snapshot from the on-disk YAML file.
"""
