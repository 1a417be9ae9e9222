"""
multimcpack.archive
-------------------

Read-only, path-like view over a modpack zip archive.

Responsibilities
- Present the archive as a navigable tree (``ArchiveView.root / "patches"``).
- Keep the archive's own listing order: ``iterdir()`` yields children in the
  order their entries first appear in the zip central directory.
- Decode entry names that are not flagged as UTF-8 with an explicit encoding,
  or detect the encoding from the raw names with charset_normalizer.

Usage
-----
with ArchiveView.open(Path("pack.zip"), auto_detect_encoding=True) as archive:
    patches = archive.root / "patches"
    if patches.is_dir():
        for entry in patches.iterdir():
            print(entry.name, len(entry.read_bytes()))
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import *

import charset_normalizer

from .exceptions import ArchiveError

logger = logging.getLogger(__name__)

# general purpose bit 11: file name is UTF-8
_UTF8_FLAG = 0x800


def _raw_name(info: zipfile.ZipInfo) -> Optional[bytes]:
    """Original name bytes for entries zipfile decoded as cp437, None for UTF-8 entries."""
    if info.flag_bits & _UTF8_FLAG:
        return None
    try:
        return info.filename.encode("cp437")
    except UnicodeEncodeError:
        return None


# Legacy encodings seen in entry names of packs zipped without the UTF-8 flag,
# most likely first. The first plausible one wins.
NAME_ENCODINGS: Tuple[str, ...] = ("gb18030", "big5", "shift_jis", "euc_kr", "cp437")


def _decodes(blob: bytes, encoding: str) -> bool:
    try:
        blob.decode(encoding)
    except UnicodeDecodeError:
        return False
    return True


def detect_name_encoding(raw_names: Iterable[bytes]) -> Optional[str]:
    """
    Guess the encoding used for a set of raw entry names.

    Pure ASCII / valid UTF-8 input returns ``"utf-8"``. Otherwise
    charset_normalizer is restricted to NAME_ENCODINGS, and of the encodings it
    finds plausible the one listed first in NAME_ENCODINGS is returned. This
    keeps the answer stable for the few bytes a single folder name gives.
    When charset_normalizer rejects them all, the first candidate that decodes
    the names is used; None when nothing fits.
    """
    blob = b"\n".join(raw_names)
    if not blob:
        return None
    if _decodes(blob, "utf-8"):
        return "utf-8"
    matches = charset_normalizer.from_bytes(blob, cp_isolation=list(NAME_ENCODINGS), threshold=0.4)
    plausible = {m.encoding for m in matches}
    for encoding in NAME_ENCODINGS:
        if encoding in plausible:
            return encoding
    for encoding in NAME_ENCODINGS:
        if _decodes(blob, encoding):
            return encoding
    return None


def _normalize(name: str) -> str:
    parts = [p for p in name.replace("\\", "/").split("/") if p and p not in (".", "..")]
    return "/".join(parts)


class ArchiveView:
    """
    A zip archive opened read-only and indexed as a tree.

    Parameters
    ----------
    zip_path : Path
        Location of the archive on disk.
    encoding : Optional[str]
        Encoding applied to entry names without the UTF-8 flag.
    auto_detect_encoding : bool
        If True and no `encoding` is given, guess it from the raw names.
    """

    def __init__(self,
                 zip_path: Union[str, Path],
                 *,
                 encoding: Optional[str] = None,
                 auto_detect_encoding: bool = False):
        self.zip_path = Path(zip_path)
        try:
            self._zip = zipfile.ZipFile(self.zip_path, "r")
        except (OSError, zipfile.BadZipFile) as exc:
            raise ArchiveError(f"Cannot open archive {self.zip_path}: {exc}") from exc

        try:
            self._index(encoding, auto_detect_encoding)
        except BaseException:
            self._zip.close()
            raise

    def _index(self, encoding: Optional[str], auto_detect_encoding: bool) -> None:
        infos = self._zip.infolist()
        raw_names = [r for r in (_raw_name(i) for i in infos) if r is not None]
        if encoding is None and auto_detect_encoding and raw_names:
            encoding = detect_name_encoding(raw_names)
            logger.debug("Detected entry name encoding %s for %s", encoding, self.zip_path)
        self.encoding = encoding

        self._files: Dict[str, zipfile.ZipInfo] = {}
        self._children: Dict[str, List[str]] = {"": []}
        for info in infos:
            self._register(self._decode_name(info), info)

    @classmethod
    def open(cls, zip_path: Union[str, Path], **kwargs) -> "ArchiveView":
        return cls(zip_path, **kwargs)

    def _decode_name(self, info: zipfile.ZipInfo) -> str:
        raw = _raw_name(info)
        if raw is None or not self.encoding:
            return info.filename
        try:
            return raw.decode(self.encoding)
        except (UnicodeDecodeError, LookupError):
            return info.filename

    def _register(self, name: str, info: zipfile.ZipInfo) -> None:
        key = _normalize(name)
        if not key:
            return
        parts = key.split("/")
        for i in range(1, len(parts) + 1):
            parent = "/".join(parts[:i - 1])
            child = "/".join(parts[:i])
            siblings = self._children.setdefault(parent, [])
            if child not in siblings:
                siblings.append(child)
            if i < len(parts):
                self._children.setdefault(child, [])
        if info.is_dir():
            self._children.setdefault(key, [])
        else:
            self._files[key] = info

    # ---- tree queries used by ArchivePath ----
    def _is_dir(self, key: str) -> bool:
        return key in self._children

    def _is_file(self, key: str) -> bool:
        return key in self._files

    def _list(self, key: str) -> List[str]:
        return list(self._children.get(key, ()))

    def _read(self, key: str) -> bytes:
        info = self._files.get(key)
        if info is None:
            raise FileNotFoundError(f"No such file in archive {self.zip_path}: /{key}")
        return self._zip.read(info)

    def _open(self, key: str) -> IO[bytes]:
        info = self._files.get(key)
        if info is None:
            raise FileNotFoundError(f"No such file in archive {self.zip_path}: /{key}")
        return self._zip.open(info, "r")

    @property
    def root(self) -> "ArchivePath":
        return ArchivePath(self, "")

    def path(self, path: str) -> "ArchivePath":
        """Resolve an absolute archive path such as ``"/.minecraft"``."""
        return ArchivePath(self, _normalize(path))

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "ArchiveView":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<ArchiveView {str(self.zip_path)!r} encoding={self.encoding!r}>"


class ArchivePath:
    """A position inside an ArchiveView; mirrors the small part of pathlib the installer needs."""

    __slots__ = ("_view", "_key")

    def __init__(self, view: ArchiveView, key: str):
        self._view = view
        self._key = key

    @property
    def name(self) -> str:
        return self._key.rsplit("/", 1)[-1] if self._key else ""

    @property
    def parent(self) -> "ArchivePath":
        return ArchivePath(self._view, self._key.rsplit("/", 1)[0] if "/" in self._key else "")

    @property
    def path(self) -> str:
        return "/" + self._key

    def joinpath(self, *others: str) -> "ArchivePath":
        key = self._key
        for other in others:
            other = str(other)
            if other.startswith("/"):
                key = _normalize(other)
            else:
                key = _normalize(f"{key}/{other}")
        return ArchivePath(self._view, key)

    def __truediv__(self, other: str) -> "ArchivePath":
        return self.joinpath(other)

    def exists(self) -> bool:
        return self._view._is_dir(self._key) or self._view._is_file(self._key)

    def is_dir(self) -> bool:
        return self._view._is_dir(self._key)

    def is_file(self) -> bool:
        return self._view._is_file(self._key)

    def iterdir(self) -> Iterator["ArchivePath"]:
        if not self.is_dir():
            raise NotADirectoryError(self.path)
        for key in self._view._list(self._key):
            yield ArchivePath(self._view, key)

    def walk_files(self) -> Iterator["ArchivePath"]:
        """Yield every file below this directory, depth-first in listing order."""
        for child in self.iterdir():
            if child.is_dir():
                yield from child.walk_files()
            elif child.is_file():
                yield child

    def relative_to(self, other: "ArchivePath") -> str:
        if not other._key:
            return self._key
        prefix = other._key + "/"
        if not self._key.startswith(prefix):
            raise ValueError(f"{self.path!r} is not under {other.path!r}")
        return self._key[len(prefix):]

    def read_bytes(self) -> bytes:
        return self._view._read(self._key)

    def read_text(self, encoding: str = "utf-8") -> str:
        return self.read_bytes().decode(encoding)

    def open(self) -> IO[bytes]:
        return self._view._open(self._key)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ArchivePath) and other._view is self._view and other._key == self._key

    def __hash__(self) -> int:
        return hash((id(self._view), self._key))

    def __str__(self) -> str:
        return self.path

    def __repr__(self) -> str:
        return f"<ArchivePath {self.path!r}>"
