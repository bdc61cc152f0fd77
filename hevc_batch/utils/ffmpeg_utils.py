"""
Runs external command-line processes (FFmpeg) and resolves the executables
to use for them.
"""

import os
import shlex
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger


def executable_path(name: str, tool_dir: Optional[Path] = None) -> str:
    """
    Determines the path of an FFmpeg tool (`ffmpeg`, `ffprobe`).

    The configured directory has priority; when it is unset or does not hold
    the executable, the bare name is returned and the system PATH decides.
    """
    exe_name = f"{name}.exe" if sys.platform == "win32" else name
    if tool_dir and tool_dir.is_dir():
        configured = tool_dir / exe_name
        if configured.is_file():
            return str(configured)
        logger.warning(f"`ffmpeg_dir` is configured, but '{exe_name}' was not found there. Falling back to system PATH.")
    return name


def display_command(cmd_list: List[str]) -> str:
    """Quotes and joins a command list for logging, per platform conventions."""
    if os.name == "nt":
        return subprocess.list2cmdline(cmd_list)
    return shlex.join(cmd_list)


def run_cmd(
    cmd_list: List[str],
    capture_output: bool = True,
    hide_window: bool = False,
) -> Optional[subprocess.CompletedProcess]:
    """
    Executes an external command and blocks until it terminates.

    There is no timeout: an encode runs to completion or until it is killed
    from outside.

    Args:
        cmd_list: The command to execute as a list of arguments.
        capture_output: Capture stdout and stderr as text. When False the
            process writes directly to the console.
        hide_window: On Windows, prevent the process from opening a console
            window. Ignored on other platforms.

    Returns:
        The `subprocess.CompletedProcess`, or None if the process could not be
        started (executable missing, permission denied).
    """
    if not cmd_list:
        logger.error("run_cmd received an empty command list.")
        return None

    logger.debug(f"Executing command: {display_command(cmd_list)}")

    creationflags = 0
    if hide_window and sys.platform == "win32":
        creationflags = subprocess.CREATE_NO_WINDOW

    try:
        result = subprocess.run(
            cmd_list,
            capture_output=capture_output,
            text=True,
            encoding="utf-8",
            errors="replace",
            shell=False,
            creationflags=creationflags,
        )
    except FileNotFoundError:
        logger.error(
            f"Command not found: '{cmd_list[0]}'. Ensure it's in your system's PATH or set `ffmpeg_dir` in the settings file."
        )
        return None
    except OSError as e:
        logger.error(f"Could not start '{cmd_list[0]}': {e}")
        return None

    if result.stderr and result.returncode != 0:
        logger.debug(f"Command stderr (error, rc={result.returncode}): {result.stderr[-2000:]}")
    elif result.stderr:
        logger.trace(f"Command stderr (rc={result.returncode}): {result.stderr[-2000:]}")
    return result
