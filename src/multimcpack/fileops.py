"""
multimcpack.fileops
-------------------

Disk writes of the installer.

- atomic_write: publish a file through a sibling temp file and os.replace
- safe_remove: delete a file or a whole instance tree, retrying on lock errors
- extract_file / copy_tree: materialize archive entries on disk

The units in content.py and resources.py decide what lands where; this
module only knows how to put bytes on disk.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import time
from pathlib import Path
from typing import *

from .archive import ArchivePath

logger = logging.getLogger(__name__)


def _flush_to_disk(handle) -> None:
    handle.flush()
    try:
        os.fsync(handle.fileno())
    except (OSError, AttributeError, ValueError):
        # some filesystems (and Windows pipes) refuse fsync
        pass


def atomic_write(dest_path: Union[str, Path],
                 data: Optional[bytes] = None,
                 chunks: Optional[Iterable[bytes]] = None,
                 *,
                 tmp_suffix: Optional[str] = None) -> Path:
    """
    Write `dest_path` so readers see either the old file or the complete new one.

    Exactly one of `data` (whole payload) or `chunks` (streamed payload, e.g.
    ``resp.iter_content()``) is given. The temp file lives next to the target,
    named with `tmp_suffix` (``.tmp`` by default), and is deleted if writing fails.

    Returns
    -------
    Path
        `dest_path`.

    Raises
    ------
    ValueError
        If both or neither of `data` and `chunks` are given.
    OSError
        If the write or the final rename fails.
    """
    target = Path(dest_path)
    if (data is None) == (chunks is None):
        raise ValueError("atomic_write needs exactly one of data= or chunks=")

    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=tmp_suffix or ".tmp")
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as out:
            for piece in ([data] if data is not None else chunks):
                if piece:
                    out.write(piece)
            _flush_to_disk(out)
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return target


def safe_remove(path: Union[str, Path], *, retries: int = 3, delay: float = 0.2) -> None:
    """
    Delete `path`, a file or a directory tree. A missing path is not an error.

    Windows keeps freshly closed jars locked for a moment, so an OSError is
    retried `retries` times, `delay` seconds apart, before it propagates.
    """
    path = Path(path)
    for attempt in range(retries + 1):
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink(missing_ok=True)
            return
        except FileNotFoundError:
            return
        except OSError:
            if attempt == retries:
                raise
            logger.debug("Removing %s failed, retrying in %.1fs", path, delay)
            time.sleep(delay)


def extract_file(src: ArchivePath, dest: Union[str, Path]) -> Path:
    """Write archive entry `src` to `dest`, replacing what is there."""
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    with src.open() as rf, open(dest, "wb") as wf:
        shutil.copyfileobj(rf, wf)
    return dest


def copy_tree(src: ArchivePath, dest: Union[str, Path]) -> int:
    """
    Mirror archive directory `src` under `dest` and return the number of files written.

    Files already under `dest` are overwritten when the archive has them too
    and left alone otherwise.
    """
    dest = Path(dest)
    dest.mkdir(parents=True, exist_ok=True)
    written = 0
    for entry in src.walk_files():
        extract_file(entry, dest / entry.relative_to(src))
        written += 1
    logger.debug("Copied %d file(s) from %s to %s", written, src, dest)
    return written
