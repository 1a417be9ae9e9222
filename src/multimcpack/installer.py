"""
multimcpack.installer
---------------------

High-level installer for MultiMC-format modpacks.

Main class: MultiMCModpackInstallTask

Phases (run by a TaskExecutor):
 - construction: refuse to touch an existing instance that was not installed
   from a modpack, select the loaders to install and schedule the base
   version build.
 - pre_execute: load the previous modpack configuration, detect the game
   directory inside the archive and schedule the content and metadata units.
 - execute: apply the pack's patches (each carrying the java agent argument
   from instance.cfg) to the base version, copy ``libraries``/``jarmods`` and
   schedule saving the final version.
 - completion: on failure the instance is removed from disk.

Usage
-----
from multimcpack import install_modpack

version = install_modpack("pack.zip", base_dir="/games/mc")
print([p.id for p in version.patches])
"""

from __future__ import annotations

import enum
import json
import logging
from pathlib import Path
from typing import *

from .agent import JavaAgentSpec, read_java_agent
from .archive import ArchiveView
from .builder import GameBuilder
from .content import MinecraftInstanceTask, ModpackInstallTask
from .download import LibraryDownloadTask
from .exceptions import ConflictingInstanceError, ManifestError, WrongInstallerTypeError
from .layout import PATCHES_DIR, detect_subdirectory
from .loaders import resolve_loaders
from .patches import merge_patches
from .paths import GameRepository
from .provider import MultiMCModpackProvider
from .resources import copy_resources
from .tasks import Task, TaskEvent, TaskExecutor
from .types_models import Modpack, ModpackConfiguration
from .version import Version

logger = logging.getLogger(__name__)

MODPACK_STAGE = "multimcpack.modpack"


class InstallState(enum.Enum):
    CONSTRUCTED = "constructed"
    PRE_EXECUTE = "pre-execute"
    EXECUTE = "execute"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class MultiMCModpackInstallTask(Task):
    """
    Installs a MultiMC modpack archive as instance `name` of `repository`.

    Parameters
    ----------
    repository : GameRepository
        Game directory receiving the instance.
    zip_file : Path
        The modpack archive.
    modpack : Modpack
        The pack as read by MultiMCModpackProvider.read_manifest.
    name : str
        Name of the instance to create or update.
    builder : Optional[GameBuilder]
        Builder for the base version; a GameBuilder on `repository` by default.

    Raises
    ------
    ConflictingInstanceError
        If `name` exists but has no modpack configuration.
    ManifestError
        If the pack declares no game version.
    """

    def __init__(self,
                 repository: GameRepository,
                 zip_file: Union[str, Path],
                 modpack: Modpack,
                 name: str,
                 *,
                 builder: Optional[GameBuilder] = None):
        super().__init__(f"install:{name}")
        self.repository = repository
        self.zip_file = Path(zip_file)
        self.modpack = modpack
        self.manifest = modpack.manifest
        self.instance_name = name
        self._dependencies: List[Task] = []
        self._dependents: List[Task] = []

        self.configuration: Optional[ModpackConfiguration] = None
        self.subdirectory: Optional[str] = None
        self.java_agent: Optional[JavaAgentSpec] = None
        self.version: Optional[Version] = None

        if repository.has_version(name) and not repository.get_modpack_configuration(name).exists():
            raise ConflictingInstanceError(f"Version {name} already exists.")
        if not self.manifest.game_version:
            raise ManifestError(f"Modpack {modpack.name!r} does not declare a game version")

        self.builder = builder or GameBuilder(repository)
        self.builder.name(name).game_version(self.manifest.game_version)
        self.loaders = resolve_loaders(self.manifest.mmc_pack, self.builder)
        self._dependents.append(self.builder.build_task())

        self.state = InstallState.CONSTRUCTED
        self.on_done(self._complete)

    @property
    def dependents(self) -> List[Task]:
        return self._dependents

    @property
    def dependencies(self) -> List[Task]:
        return self._dependencies

    def do_pre_execute(self) -> bool:
        return True

    def pre_execute(self) -> None:
        self.state = InstallState.PRE_EXECUTE
        self.configuration = self._load_configuration()

        with ArchiveView.open(self.zip_file, encoding=self.modpack.encoding) as archive:
            self.subdirectory = detect_subdirectory(archive.root, self.manifest.name)
        logger.info("Installing %s from %s (game directory %s)", self.instance_name, self.zip_file, self.subdirectory)

        subdirectories = [self.subdirectory]
        self._dependents.append(
            ModpackInstallTask(self.zip_file,
                               self.repository.get_run_directory(self.instance_name),
                               self.modpack.encoding,
                               subdirectories,
                               old_configuration=self.configuration).with_stage(MODPACK_STAGE))
        self._dependents.append(
            MinecraftInstanceTask(self.zip_file,
                                  self.modpack.encoding,
                                  subdirectories,
                                  self.manifest,
                                  MultiMCModpackProvider.NAME,
                                  self.manifest.name,
                                  self.modpack.version,
                                  self.repository.get_modpack_configuration(self.instance_name)).with_stage(MODPACK_STAGE))

    def _load_configuration(self) -> Optional[ModpackConfiguration]:
        """
        Previous modpack configuration, or None when absent or unreadable.

        Raises
        ------
        WrongInstallerTypeError
            If the instance was installed from another modpack format.
        """
        path = self.repository.get_modpack_configuration(self.instance_name)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                config = ModpackConfiguration.from_dict(json.load(f))
        except (OSError, ValueError, KeyError, TypeError):
            logger.warning("Ignoring unreadable modpack configuration %s", path, exc_info=True)
            return None
        if config.type != MultiMCModpackProvider.NAME:
            raise WrongInstallerTypeError(
                f"Version {self.instance_name} is not a {MultiMCModpackProvider.NAME} modpack. Cannot update this version.")
        return config

    def _read_base_version(self) -> Version:
        try:
            return self.repository.read_version_json(self.instance_name)
        except FileNotFoundError:
            return Version(id=self.instance_name, version=self.manifest.game_version)

    def execute(self) -> None:
        self.state = InstallState.EXECUTE
        version = self._read_base_version()
        self.java_agent = read_java_agent(self.repository.get_run_directory(self.instance_name))

        with ArchiveView.open(self.zip_file, encoding=self.modpack.encoding, auto_detect_encoding=True) as archive:
            root = MultiMCModpackProvider.get_root_path(archive.root)
            version = merge_patches(version, root / PATCHES_DIR, self.java_agent.argument)
            copy_resources(root, self.repository.get_version_root(self.instance_name))

        self.version = version
        self._dependencies.append(self.repository.save_task(version))

    def _complete(self, event: TaskEvent) -> None:
        if not event.failed:
            self.state = InstallState.SUCCEEDED
            logger.info("Installed modpack %s", self.instance_name)
            return
        self.state = InstallState.FAILED
        logger.error("Installing %s failed: %s", self.instance_name, event.exception)
        try:
            self.repository.remove_version_from_disk(self.instance_name)
        except OSError:
            logger.error("Could not remove partially installed %s", self.instance_name, exc_info=True)


def install_modpack(zip_file: Union[str, Path],
                    name: Optional[str] = None,
                    *,
                    repository: Optional[GameRepository] = None,
                    base_dir: Optional[Union[str, Path]] = None,
                    encoding: Optional[str] = None,
                    max_workers: int = 4,
                    download_libraries: bool = False,
                    session=None) -> Version:
    """
    Read and install a MultiMC modpack archive.

    Parameters
    ----------
    zip_file : Path
        The modpack archive.
    name : Optional[str]
        Instance name; defaults to the pack's name.
    repository : Optional[GameRepository]
        Target game directory; built from `base_dir` when omitted.
    base_dir : Optional[Path]
        Root of the game directory (platform default when both are omitted).
    encoding : Optional[str]
        Encoding of archive entry names; auto-detected when None.
    max_workers : int
        Units run concurrently by the executor.
    download_libraries : bool
        Afterwards fetch remote libraries of the installed version.
    session : Optional[requests.Session]
        Session used for library downloads.

    Returns
    -------
    Version
        The saved version descriptor.
    """
    repository = repository or GameRepository(base_dir)
    modpack = MultiMCModpackProvider.read_manifest(zip_file, encoding)
    task = MultiMCModpackInstallTask(repository, zip_file, modpack, name or modpack.name)
    executor = TaskExecutor(max_workers=max_workers)
    executor.run(task)
    if download_libraries:
        executor.run(LibraryDownloadTask(repository, task.instance_name, session=session))
    return task.version
