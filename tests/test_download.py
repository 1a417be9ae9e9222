"""
Tests for LibraryDownloadTask with a mocked requests session.
"""

from unittest.mock import MagicMock

import pytest
import requests

from multimcpack.download import LibraryDownloadTask
from multimcpack.exceptions import DownloadError
from multimcpack.utils import sha1_bytes
from multimcpack.version import Library, Version

PAYLOAD = b"library-bytes"


def _response(status=200, body=PAYLOAD):
    resp = MagicMock()
    resp.__enter__.return_value = resp
    resp.status_code = status
    resp.iter_content.return_value = [body[:4], body[4:]]
    return resp


def _save(repo, *libraries):
    repo.save_version(Version(id="pack", version="1.12.2", libraries=list(libraries)))


def _task(repo, session, **kwargs):
    kwargs.setdefault("backoff_base", 0)
    return LibraryDownloadTask(repo, "pack", session=session, max_workers=1, **kwargs)


def test_downloads_remote_library_and_skips_local(repo):
    remote = Library(name="com.example:lib:1.0", url="https://maven.example.com/", sha1=sha1_bytes(PAYLOAD))
    local = Library(name="net.minecraftforge:forge:1.12.2", hint="local")
    _save(repo, remote, local)
    session = MagicMock()
    session.get.return_value = _response()

    task = _task(repo, session)
    task.execute()

    session.get.assert_called_once()
    assert session.get.call_args[0][0] == "https://maven.example.com/com/example/lib/1.0/lib-1.0.jar"
    assert repo.get_library_file(remote).read_bytes() == PAYLOAD
    assert task.downloaded == [repo.get_library_file(remote)]


def test_present_library_with_matching_checksum_is_skipped(repo):
    lib = Library(name="com.example:lib:1.0", url="https://maven.example.com", sha1=sha1_bytes(PAYLOAD))
    _save(repo, lib)
    dest = repo.get_library_file(lib)
    dest.parent.mkdir(parents=True)
    dest.write_bytes(PAYLOAD)
    session = MagicMock()

    assert _task(repo, session).pending_libraries() == []
    session.get.assert_not_called()


def test_checksum_mismatch_fails_and_removes_file(repo):
    lib = Library(name="com.example:lib:1.0", url="https://maven.example.com", sha1="0" * 40)
    _save(repo, lib)
    session = MagicMock()
    session.get.side_effect = lambda *a, **kw: _response()

    with pytest.raises(DownloadError, match="1 library failed"):
        _task(repo, session, max_retries=2).execute()
    assert session.get.call_count == 2
    assert not repo.get_library_file(lib).exists()


def test_retries_after_transient_error(repo):
    lib = Library(name="com.example:lib:1.0", url="https://maven.example.com")
    _save(repo, lib)
    session = MagicMock()
    session.get.side_effect = [requests.ConnectionError("reset"), _response(status=503), _response()]

    _task(repo, session, max_retries=3).execute()
    assert repo.get_library_file(lib).read_bytes() == PAYLOAD


def test_http_error_is_reported(repo):
    lib = Library(name="com.example:lib:1.0", url="https://maven.example.com")
    _save(repo, lib)
    session = MagicMock()
    session.get.return_value = _response(status=404)

    with pytest.raises(DownloadError, match="HTTP 404"):
        _task(repo, session, max_retries=1).execute()
