"""
multimcpack.paths
-----------------

Platform-aware path utilities and the GameRepository that owns on-disk instance state.

Responsibilities
- Provide a sane default game directory across OSes.
- Map an instance name to its version root, run directory, version JSON and
  modpack configuration JSON.
- Read and persist version descriptors.
- Remove an instance from disk (used to roll back a failed installation).

Usage
-----
from pathlib import Path
from multimcpack.paths import GameRepository

repo = GameRepository(Path("/games/mc"))
repo.get_version_json("pack1")        # /games/mc/versions/pack1/pack1.json
repo.get_modpack_configuration("pack1")  # /games/mc/versions/pack1/modpack.json
"""

from __future__ import annotations

import json
import logging
import os
import platform
from pathlib import Path
from typing import *

from .fileops import atomic_write, safe_remove
from .tasks import FunctionTask, Task
from .version import Version

logger = logging.getLogger(__name__)

VERSIONS_DIR = "versions"
LIBRARIES_DIR = "libraries"
MODPACK_CONFIGURATION = "modpack.json"


def _ensure_dir(path: Path, mode: int = 0o755) -> Path:
    """Create `path` and its parents if needed; returns `path`."""
    path = Path(path)
    path.mkdir(mode=mode, parents=True, exist_ok=True)
    return path


def _detect_default_minecraft_dir() -> Path:
    """
    Game directory the vanilla launcher uses on this OS.

    ``%APPDATA%/.minecraft`` on Windows (home directory when APPDATA is unset),
    ``~/Library/Application Support/minecraft`` on macOS, ``~/.minecraft`` elsewhere.
    """
    system = platform.system()
    home = Path.home()
    if system == "Windows":
        appdata = os.getenv("APPDATA")
        if appdata:
            return Path(appdata) / ".minecraft"
        return home / ".minecraft"
    elif system == "Darwin":
        return home / "Library" / "Application Support" / "minecraft"
    else:
        return home / ".minecraft"


class GameRepository:
    """
    On-disk layout of a game directory holding isolated instances.

    Every instance lives in ``<base_dir>/versions/<name>/``; that folder is both
    the version root (version JSON, ``libraries``, ``jarmods``) and the run
    directory the game is started in.

    Parameters
    ----------
    base_dir : Optional[Path]
        Root of the game directory. Detected per platform when omitted.
    """

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        root = Path(base_dir) if base_dir else _detect_default_minecraft_dir()
        self.base_dir = root.expanduser().resolve()

    @property
    def versions_dir(self) -> Path:
        return self.base_dir / VERSIONS_DIR

    @property
    def libraries_dir(self) -> Path:
        return self.base_dir / LIBRARIES_DIR

    def get_version_root(self, name: str) -> Path:
        return self.versions_dir / name

    def get_run_directory(self, name: str) -> Path:
        return self.get_version_root(name)

    def get_version_json(self, name: str) -> Path:
        return self.get_version_root(name) / f"{name}.json"

    def get_modpack_configuration(self, name: str) -> Path:
        return self.get_version_root(name) / MODPACK_CONFIGURATION

    def get_library_file(self, library) -> Path:
        """Location of a library artifact in the shared library store."""
        return self.libraries_dir / library.path

    def has_version(self, name: str) -> bool:
        return self.get_version_root(name).is_dir()

    def read_version_json(self, name: str) -> Version:
        """
        Load the persisted version descriptor of `name`.

        Raises
        ------
        FileNotFoundError
            If the instance has no version JSON.
        ValueError
            If the JSON is malformed.
        """
        path = self.get_version_json(name)
        with open(path, "r", encoding="utf-8") as f:
            return Version.from_dict(json.load(f))

    def save_version(self, version: Version) -> Path:
        """Atomically write `version` to its version JSON and return the path."""
        path = self.get_version_json(version.id)
        _ensure_dir(path.parent)
        payload = json.dumps(version.to_dict(), indent=2, ensure_ascii=False)
        atomic_write(path, data=payload.encode("utf-8"))
        logger.debug("Saved version %s to %s", version.id, path)
        return path

    def save_task(self, version: Version) -> Task:
        """A unit that persists `version` when the scheduler runs it."""
        return FunctionTask(lambda: self.save_version(version), name=f"save:{version.id}")

    def remove_version_from_disk(self, name: str) -> bool:
        """
        Delete the instance folder with everything in it (rollback of a failed install).

        Returns True when something was deleted.
        """
        root = self.get_version_root(name)
        if not root.exists():
            return False
        safe_remove(root)
        logger.info("Removed instance %s from %s", name, root)
        return True

    def __repr__(self) -> str:
        return f"<GameRepository base={str(self.base_dir)!r}>"
