"""
Filesystem side of the mirror: directories, file writes and branch markers.
"""

import os
from pathlib import Path

import aiofiles
import aiofiles.os

from ..infrastructure.logger import logger
from ..models import BRANCH_MARKER_NAME


FILE_MODE = 0o600


class DownloadService:
    """Persists retrieved content under the output directory."""

    def __init__(self, file_mode: int = FILE_MODE):
        self.file_mode = file_mode

    def _opener(self, path: str, flags: int) -> int:
        fd = os.open(path, flags, self.file_mode)
        # Creation mode does not apply to files left by an earlier run
        os.fchmod(fd, self.file_mode)
        return fd

    async def ensure_directory(self, path: Path) -> None:
        await aiofiles.os.makedirs(path, exist_ok=True)

    async def write_bytes(self, path: Path, data: bytes) -> int:
        """
        Write ``data`` verbatim to ``path``, replacing any previous content.

        Returns:
            Number of bytes written
        """
        await self.ensure_directory(path.parent)

        async with aiofiles.open(path, 'wb', opener=self._opener) as file_d:
            await file_d.write(data)
        return len(data)

    async def create_marker(self, branch_dir: Path) -> Path:
        """Create the empty marker flagging ``branch_dir`` as a branch snapshot."""

        marker = branch_dir / BRANCH_MARKER_NAME
        async with aiofiles.open(marker, 'wb'):
            pass
        return marker

    async def prepare_branch_directory(self, branch_dir: Path) -> Path:
        """Create the branch directory and its marker before any content fetch."""

        await self.ensure_directory(branch_dir)
        marker = await self.create_marker(branch_dir)
        logger.debug(f"Prepared branch directory {branch_dir}")
        return marker


__all__ = ["FILE_MODE", "DownloadService"]
