"""
multimcpack package initializer.

This file exposes the high-level public API for the package:
 - install_modpack (convenience entry point)
 - MultiMCModpackInstallTask (the installation pipeline)
 - MultiMCModpackProvider (reading MultiMC archives)
 - GameRepository (on-disk instances)
 - TaskExecutor (runs installation units)
 - exceptions (module with custom exceptions)

Implementation notes:
 - Avoid heavy work at import time.
"""

__all__ = [
    "install_modpack",
    "MultiMCModpackInstallTask",
    "MultiMCModpackProvider",
    "GameRepository",
    "TaskExecutor",
    "Version",
    "exceptions",
    "__version__",
]

# package version (update as you release)
__version__ = "0.1.0"

# re-export exceptions for convenience
from .exceptions import *  # noqa: F401,F403
from . import exceptions

from .installer import MultiMCModpackInstallTask, install_modpack
from .paths import GameRepository
from .provider import MultiMCModpackProvider
from .tasks import TaskExecutor
from .version import Version
