import stat
from unittest.mock import patch

import aiofiles
import pytest

from branchmirror.services.download import DownloadService


def mode_of(path):
    return stat.S_IMODE(path.stat().st_mode)


async def test_write_bytes_creates_parents_and_restricts_mode(tmp_path):
    service = DownloadService()
    target = tmp_path / "a" / "b" / "file.bin"

    written = await service.write_bytes(target, b"\x00\x01payload")

    assert written == 9
    assert target.read_bytes() == b"\x00\x01payload"
    assert mode_of(target) == 0o600


async def test_write_bytes_is_verbatim(tmp_path):
    service = DownloadService()
    target = tmp_path / "crlf.txt"

    await service.write_bytes(target, b"line1\r\nline2\r\n")

    assert target.read_bytes() == b"line1\r\nline2\r\n"


async def test_write_bytes_overwrites_and_fixes_mode(tmp_path):
    service = DownloadService()
    target = tmp_path / "file.txt"
    target.write_bytes(b"old content that is longer")
    target.chmod(0o644)

    await service.write_bytes(target, b"new")

    assert target.read_bytes() == b"new"
    assert mode_of(target) == 0o600


async def test_ensure_directory_is_idempotent(tmp_path):
    service = DownloadService()
    directory = tmp_path / "x" / "y"

    await service.ensure_directory(directory)
    await service.ensure_directory(directory)

    assert directory.is_dir()


async def test_prepare_branch_directory_writes_empty_marker(tmp_path):
    service = DownloadService()
    branch_dir = tmp_path / "acme" / "widgets" / "main"

    marker = await service.prepare_branch_directory(branch_dir)

    assert marker == branch_dir / ".git"
    assert marker.is_file()
    assert marker.read_bytes() == b""


async def test_prepare_branch_directory_resets_existing_marker(tmp_path):
    service = DownloadService()
    branch_dir = tmp_path / "main"
    branch_dir.mkdir()
    (branch_dir / ".git").write_bytes(b"stale")

    await service.prepare_branch_directory(branch_dir)

    assert (branch_dir / ".git").read_bytes() == b""


async def test_writes_go_through_aiofiles(tmp_path):
    service = DownloadService()
    target = tmp_path / "file.txt"

    with patch('branchmirror.services.download.aiofiles.open', wraps=aiofiles.open) as mock_open:
        await service.write_bytes(target, b"data")
        await service.prepare_branch_directory(tmp_path / "main")

    assert mock_open.call_count == 2
    assert mock_open.call_args_list[0].args == (target, 'wb')
    assert target.read_bytes() == b"data"


async def test_file_in_place_of_directory_raises_os_error(tmp_path):
    service = DownloadService()
    (tmp_path / "main").write_bytes(b"not a directory")

    with pytest.raises(OSError):
        await service.prepare_branch_directory(tmp_path / "main")
