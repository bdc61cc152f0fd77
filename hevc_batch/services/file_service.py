"""
File relocation: copy, move and delete single files.

Every operation reports success or failure as a boolean instead of raising,
so the verifier can branch on the outcome of each step. Expected conditions
such as a full destination volume, a missing file or a permission error are
logged and returned as False.
"""

import shutil
from pathlib import Path

from loguru import logger
from send2trash import send2trash


class FileRelocator:
    def copy(self, src: Path, dst: Path, overwrite: bool = False) -> bool:
        """Copies `src` to `dst`, keeping metadata. Fails if `dst` exists and overwrite is False."""
        if not src.is_file():
            logger.error(f"Copy failed, source file not found: {src}")
            return False
        existed = dst.exists()
        if existed and not overwrite:
            logger.error(f"Copy failed, destination already exists: {dst}")
            return False
        try:
            shutil.copy2(src, dst)
        except OSError as e:
            logger.error(f"Failed to copy {src} to {dst}: {e}")
            if not existed:
                _remove_partial(dst)
            return False
        logger.debug(f"Copied {src} to {dst}")
        return True

    def move(self, src: Path, dst: Path, overwrite: bool = False) -> bool:
        """
        Moves `src` to `dst`. Fails if `dst` exists and overwrite is False.

        A move across volumes is a copy followed by a delete; if the copy
        runs out of space the partial destination file is removed and
        `src` stays where it was.
        """
        if not src.is_file():
            logger.error(f"Move failed, source file not found: {src}")
            return False
        existed = dst.exists()
        if existed:
            if not overwrite:
                logger.error(f"Move failed, destination already exists: {dst}")
                return False
            if dst.is_dir():
                logger.error(f"Move failed, destination is a directory: {dst}")
                return False
        try:
            shutil.move(str(src), str(dst))
        except OSError as e:
            logger.error(f"Failed to move {src} to {dst}: {e}")
            if src.exists() and not existed:
                _remove_partial(dst)
            return False
        logger.debug(f"Moved {src} to {dst}")
        return True

    def delete(self, path: Path, permanently: bool = False) -> bool:
        """Deletes `path`, or sends it to the trash when `permanently` is False."""
        if not path.exists():
            logger.error(f"Delete failed, file not found: {path}")
            return False
        try:
            if permanently:
                path.unlink()
            else:
                send2trash(str(path))
        except OSError as e:
            logger.error(f"Failed to delete {path}: {e}")
            return False
        logger.debug(f"Deleted {path} ({'permanently' if permanently else 'to trash'})")
        return True


def _remove_partial(path: Path):
    try:
        if path.is_file():
            path.unlink()
    except OSError as e:
        logger.warning(f"Could not remove partial file {path}: {e}")
