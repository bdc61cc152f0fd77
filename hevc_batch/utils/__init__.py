"""
Utilities package for hevc_batch.

Modules:
    - ffmpeg_utils.py: resolves FFmpeg executables and runs external commands.
    - format_utils.py: human-readable durations, sizes and size ratios.
    - tool_check.py: startup verification that ffmpeg and ffprobe work.
"""
