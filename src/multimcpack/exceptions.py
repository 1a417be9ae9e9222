"""
multimcpack.exceptions
----------------------

Errors raised while reading and installing MultiMC modpacks.

Every failure that aborts an installation has its own subclass so callers
can tell a conflicting instance from a broken pack. I/O errors are not
wrapped; they propagate as OSError.
"""

from typing import Optional, Any


class MultiMCPackError(Exception):
    """
    Root of every error raised by multimcpack.

    Attributes
    ----------
    message: str
        What went wrong, with the offending name or path.
    code: Optional[int]
        HTTP status of a failed download, otherwise usually None.
    response: Optional[Any]
        Raw response object or offending payload for debugging.
    """

    def __init__(self, message: str, code: Optional[int] = None, response: Optional[Any] = None):
        self.message = message
        self.code = code
        self.response = response
        super().__init__(self.__str__())

    def __str__(self) -> str:
        base = f"[MultiMCPackError] {self.message}"
        if self.code is not None:
            base += f" (code={self.code})"
        return base

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} code={self.code!r} message={self.message!r}>"


class ConflictingInstanceError(MultiMCPackError):
    """An instance with the same name exists but was not installed from a modpack."""


class WrongInstallerTypeError(MultiMCPackError):
    """The existing modpack configuration belongs to a different modpack format."""


class MalformedPatchError(MultiMCPackError):
    """
    Raised when a ``patches/*.json`` descriptor cannot be parsed.

    The installation is aborted instead of skipping the patch, since an
    instance without its loader patch would not launch correctly.
    """

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        self.path = path
        super().__init__(message, **kwargs)


class MissingConfigurationKeyError(MultiMCPackError):
    """Raised when a required key is absent from ``instance.cfg``."""

    def __init__(self, message: str, key: Optional[str] = None, **kwargs):
        self.key = key
        super().__init__(message, **kwargs)


class ManifestError(MultiMCPackError):
    """
    The pack has no usable instance.cfg, its mmc-pack.json cannot be parsed,
    or it names no game version.
    """


class ArchiveError(MultiMCPackError):
    """Raised when the modpack archive cannot be opened or holds no entries."""


class DownloadError(MultiMCPackError):
    """Raised for library download errors (I/O, remote 4xx/5xx, checksum mismatch)."""
