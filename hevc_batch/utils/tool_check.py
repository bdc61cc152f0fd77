"""
Startup verification of the external FFmpeg tools.
"""
import subprocess
from pathlib import Path
from typing import Optional

from loguru import logger

from ..domain.exceptions import ExternalToolException
from .ffmpeg_utils import executable_path


def verify_tool(name: str, tool_dir: Optional[Path] = None) -> str:
    """
    Verifies that an FFmpeg tool is installed and can be executed.

    Runs `<tool> -version` and logs the first line of its output.

    Returns:
        The command or absolute path that was verified.

    Raises:
        ExternalToolException: The tool is missing or exits with an error.
    """
    tool_cmd = executable_path(name, tool_dir)
    try:
        result = subprocess.run(
            [tool_cmd, "-version"],
            check=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except subprocess.CalledProcessError as e:
        raise ExternalToolException(
            f"{name} version command failed (return code {e.returncode}):\n{e.stderr}"
        ) from e
    except FileNotFoundError as e:
        raise ExternalToolException(
            f"{name} command not found. Install FFmpeg and add it to PATH, "
            "or set `ffmpeg_dir` in the settings file."
        ) from e
    except OSError as e:
        raise ExternalToolException(f"Could not execute {tool_cmd}: {e}") from e

    version_lines = result.stdout.splitlines()
    logger.info(f"{name} version check successful: {version_lines[0] if version_lines else 'unknown version'}")
    return tool_cmd


def verify_ffmpeg_tools(tool_dir: Optional[Path] = None):
    """Verifies both ffmpeg and ffprobe; called once at startup."""
    verify_tool("ffmpeg", tool_dir)
    verify_tool("ffprobe", tool_dir)
