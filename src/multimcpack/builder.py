"""
multimcpack.builder
-------------------

GameBuilder collects what the base version of an instance is made of (game
version plus requested loader versions) and produces the unit that writes
the base version descriptor.

Installing the loaders themselves is left to dedicated installers; the base
descriptor records each request as a placeholder patch they can fill in.
"""

from __future__ import annotations

import logging
from typing import *

from .tasks import FunctionTask, Task
from .version import Version

logger = logging.getLogger(__name__)

GAME = "game"
VANILLA_MAIN_CLASS = "net.minecraft.client.main.Main"


class GameBuilder:
    """
    Fluent builder for the base version of an instance.

    Example
    -------
    >>> builder = GameBuilder(repo).name("pack1").game_version("1.12.2")
    >>> builder.version("forge", "14.23.5.2860")
    >>> task = builder.build_task()
    """

    def __init__(self, repository):
        self.repository = repository
        self._name: Optional[str] = None
        self._versions: Dict[str, str] = {}

    def name(self, name: str) -> "GameBuilder":
        self._name = name
        return self

    def game_version(self, version: str) -> "GameBuilder":
        return self.version(GAME, version)

    def version(self, component: str, version: str) -> "GameBuilder":
        self._versions[component] = version
        return self

    @property
    def requested_versions(self) -> Dict[str, str]:
        """Component -> version, in request order (``game`` included)."""
        return dict(self._versions)

    def build(self) -> Version:
        if not self._name:
            raise ValueError("GameBuilder requires a name")
        game_version = self._versions.get(GAME)
        patches = []
        for component, version in self._versions.items():
            patches.append(Version(id=component, version=version, priority=0 if component == GAME else None))
        return Version(
            id=self._name,
            version=game_version,
            main_class=VANILLA_MAIN_CLASS,
            jar=game_version,
            patches=patches,
        )

    def build_task(self) -> Task:
        """A unit writing the base version descriptor when run."""
        def _write_base_version():
            version = self.build()
            logger.info("Writing base version %s (%s)", version.id,
                        ", ".join(f"{k} {v}" for k, v in self._versions.items()))
            return self.repository.save_version(version)
        return FunctionTask(_write_base_version, name=f"build:{self._name}")
