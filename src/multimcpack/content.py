"""
multimcpack.content
-------------------

Units that install the game-directory content of a modpack.

- ModpackInstallTask extracts the detected game directory of the archive into
  the instance's run directory, respecting files the user changed since the
  previous install.
- MinecraftInstanceTask records which files came from the pack (with their
  SHA-1) in the instance's modpack configuration.

Both are given the same list of archive subdirectories so they agree on what
"the pack's files" are.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import *

from .archive import ArchiveView
from .fileops import atomic_write, extract_file, safe_remove
from .tasks import Task
from .types_models import ModpackConfiguration, ModpackFile, MultiMCInstanceConfiguration
from .utils import sha1_bytes, sha1_sum

logger = logging.getLogger(__name__)


class ModpackInstallTask(Task):
    """
    Extract `subdirectories` of `zip_file` into `dest`.

    Parameters
    ----------
    zip_file : Path
        The modpack archive.
    dest : Path
        Run directory of the instance.
    encoding : Optional[str]
        Encoding of archive entry names.
    subdirectories : List[str]
        Archive paths whose contents are copied into `dest`.
    file_filter : Callable[[str], bool]
        Receives each relative path; False skips the file.
    old_configuration : Optional[ModpackConfiguration]
        Configuration of the previous install. Files it lists that the user
        modified are kept; unmodified ones missing from the new pack are removed.
    """

    def __init__(self,
                 zip_file: Union[str, Path],
                 dest: Union[str, Path],
                 encoding: Optional[str],
                 subdirectories: List[str],
                 file_filter: Callable[[str], bool] = lambda path: True,
                 old_configuration: Optional[ModpackConfiguration] = None):
        super().__init__("modpack-content")
        self.zip_file = Path(zip_file)
        self.dest = Path(dest)
        self.encoding = encoding
        self.subdirectories = list(subdirectories)
        self.file_filter = file_filter
        self.old_configuration = old_configuration
        self.installed: List[str] = []

    def execute(self) -> None:
        old_hashes = self.old_configuration.override_hashes() if self.old_configuration else {}
        seen = set()
        self.dest.mkdir(parents=True, exist_ok=True)
        with ArchiveView.open(self.zip_file, encoding=self.encoding) as archive:
            for subdirectory in self.subdirectories:
                src = archive.path(subdirectory)
                if not src.is_dir():
                    logger.debug("%s not present in %s", subdirectory, self.zip_file)
                    continue
                for entry in src.walk_files():
                    rel = entry.relative_to(src)
                    if not self.file_filter(rel):
                        continue
                    seen.add(rel)
                    target = self.dest / rel
                    if rel in old_hashes and target.is_file() and sha1_sum(target) != old_hashes[rel]:
                        logger.info("Keeping user-modified file %s", rel)
                        continue
                    extract_file(entry, target)
                    self.installed.append(rel)

        for rel, recorded in old_hashes.items():
            if rel in seen:
                continue
            target = self.dest / rel
            if target.is_file() and sha1_sum(target) == recorded:
                safe_remove(target)
                logger.debug("Removed %s, no longer part of the pack", rel)
        logger.info("Installed %d file(s) into %s", len(self.installed), self.dest)


class MinecraftInstanceTask(Task):
    """
    Write the modpack configuration describing the files of `subdirectories`.

    Parameters
    ----------
    zip_file : Path
        The modpack archive.
    encoding : Optional[str]
        Encoding of archive entry names.
    subdirectories : List[str]
        Archive paths whose files are recorded.
    manifest : MultiMCInstanceConfiguration
        Manifest stored in the configuration for later updates.
    provider_name : str
        Modpack format, e.g. ``"MultiMC"``.
    name : str
        Pack name.
    version : Optional[str]
        Pack version.
    config_path : Path
        Destination of the modpack configuration JSON.
    """

    def __init__(self,
                 zip_file: Union[str, Path],
                 encoding: Optional[str],
                 subdirectories: List[str],
                 manifest: MultiMCInstanceConfiguration,
                 provider_name: str,
                 name: str,
                 version: Optional[str],
                 config_path: Union[str, Path]):
        super().__init__("modpack-metadata")
        self.zip_file = Path(zip_file)
        self.encoding = encoding
        self.subdirectories = list(subdirectories)
        self.manifest = manifest
        self.provider_name = provider_name
        self.pack_name = name
        self.pack_version = version
        self.config_path = Path(config_path)
        self.configuration: Optional[ModpackConfiguration] = None

    def execute(self) -> None:
        overrides: List[ModpackFile] = []
        with ArchiveView.open(self.zip_file, encoding=self.encoding) as archive:
            for subdirectory in self.subdirectories:
                src = archive.path(subdirectory)
                if not src.is_dir():
                    continue
                for entry in src.walk_files():
                    overrides.append(ModpackFile(path=entry.relative_to(src), hash=sha1_bytes(entry.read_bytes())))

        self.configuration = ModpackConfiguration(
            type=self.provider_name,
            name=self.pack_name,
            version=self.pack_version,
            manifest=self.manifest.to_dict(),
            overrides=overrides,
        )
        payload = json.dumps(self.configuration.to_dict(), indent=2, ensure_ascii=False)
        atomic_write(self.config_path, data=payload.encode("utf-8"))
        logger.info("Recorded %d pack file(s) in %s", len(overrides), self.config_path)
