"""
multimcpack.download
--------------------

Fetches the remote libraries of an installed instance.

Features
- Skips libraries the pack ships itself (``MMC-hint: local``) and files
  already present with the expected SHA-1
- Atomic promotion of completed downloads (.part temp file -> final name)
- Checksum verification
- Retries with exponential backoff
- Parallel downloads with a ThreadPoolExecutor
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import *

import requests

from .exceptions import DownloadError
from .fileops import atomic_write, safe_remove
from .tasks import Task
from .utils import exponential_backoff, session_factory, sha1_sum
from .version import Library

logger = logging.getLogger(__name__)


class LibraryDownloadTask(Task):
    """
    Download every missing remote library of instance `name`.

    Parameters
    ----------
    repository : GameRepository
        Repository the instance lives in; libraries go to its library store.
    name : str
        Instance whose saved version descriptor lists the libraries.
    session : Optional[requests.Session]
        Session to use. If not provided, one is built with session_factory.
    max_workers : int
        Number of parallel downloads.
    max_retries : int
        Max attempts per file (including initial attempt).
    backoff_base : float
        Base backoff seconds used (exponential).
    timeout : float
        Per-request timeout (seconds).
    """

    def __init__(self,
                 repository,
                 name: str,
                 *,
                 session: Optional[requests.Session] = None,
                 max_workers: int = 4,
                 max_retries: int = 3,
                 backoff_base: float = 0.6,
                 timeout: float = 30.0):
        super().__init__(f"libraries:{name}")
        self.repository = repository
        self.instance_name = name
        self.session = session or session_factory()
        self.max_workers = max(1, int(max_workers))
        self.max_retries = max(1, int(max_retries))
        self.backoff_base = float(backoff_base)
        self.timeout = float(timeout)
        self.downloaded: List[Path] = []

    def pending_libraries(self) -> List[Library]:
        """Remote libraries of the saved version that are missing or fail their checksum."""
        version = self.repository.read_version_json(self.instance_name)
        pending = []
        for lib in version.all_libraries():
            if lib.is_local or not lib.download_url:
                continue
            dest = self.repository.get_library_file(lib)
            if dest.is_file() and (not lib.sha1 or sha1_sum(dest) == lib.sha1):
                continue
            pending.append(lib)
        return pending

    def execute(self) -> None:
        pending = self.pending_libraries()
        if not pending:
            logger.info("All libraries of %s are present", self.instance_name)
            return

        failures: List[str] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as exe:
            future_to_lib = {exe.submit(self._download, lib): lib for lib in pending}
            for fut in as_completed(future_to_lib):
                lib = future_to_lib[fut]
                try:
                    self.downloaded.append(fut.result())
                except DownloadError as exc:
                    failures.append(f"{lib.name}: {exc.message}")
        if failures:
            raise DownloadError(f"{len(failures)} librar{'y' if len(failures) == 1 else 'ies'} failed: " + "; ".join(failures))
        logger.info("Downloaded %d librar(ies) for %s", len(self.downloaded), self.instance_name)

    def _download(self, lib: Library) -> Path:
        url = lib.download_url
        dest = self.repository.get_library_file(lib)
        last_exc: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                with self.session.get(url, stream=True, timeout=self.timeout) as resp:
                    if resp.status_code >= 400:
                        raise DownloadError(f"HTTP {resp.status_code} for URL {url}", code=resp.status_code)
                    atomic_write(dest, chunks=resp.iter_content(chunk_size=8192), tmp_suffix=".part")
                if lib.sha1 and sha1_sum(dest) != lib.sha1:
                    safe_remove(dest)
                    raise DownloadError(f"Checksum mismatch for {lib.name}")
                logger.debug("Downloaded %s -> %s", url, dest)
                return dest
            except (requests.RequestException, DownloadError, OSError) as exc:
                last_exc = exc
                if attempt < self.max_retries:
                    wait = exponential_backoff(attempt, base=self.backoff_base)
                    logger.debug("Download of %s failed (attempt %d/%d): %s; sleeping %.2fs",
                                 url, attempt, self.max_retries, exc, wait)
                    time.sleep(wait)
        raise DownloadError(f"Failed to download {url}: {last_exc}") from last_exc
