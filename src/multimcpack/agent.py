"""
multimcpack.agent
-----------------

Recovers the java agent an instance is launched with from its instance.cfg.

Packs bootstrapped with packwiz ship a ``JvmArgs`` line such as::

    JvmArgs=-javaagent:packwiz-installer-bootstrap.jar=https://example.com/pack.toml

The value is parsed once into a JavaAgentSpec; the rest of the installer only
sees the typed record and its ``argument``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import *

from .exceptions import MissingConfigurationKeyError
from .layout import INSTANCE_CFG

logger = logging.getLogger(__name__)

JVM_ARGS_KEY = "JvmArgs"
JAVAAGENT_FLAG = "-javaagent:"


@dataclass(frozen=True)
class JavaAgentSpec:
    """
    Attributes
    ----------
    jar_path : str
        Absolute path of the agent jar inside the game directory.
    pack_url : str
        Remote manifest URL handed to the agent.
    """
    jar_path: str
    pack_url: str

    @property
    def argument(self) -> str:
        return f"{JAVAAGENT_FLAG}{self.jar_path}={self.pack_url}"


def parse_jvm_args(value: str, game_directory: str) -> JavaAgentSpec:
    """
    Split a ``JvmArgs`` value of the form ``<flag>:<jar>=<url>``.

    Only the first ``=`` separates the URL, so query strings survive.

    Raises
    ------
    MissingConfigurationKeyError
        If the jar path or the URL cannot be found in `value`.
    """
    # first "=" only; taking split("=")[1] would cut ".../pack.toml?ref=main" to ".../pack.toml?ref"
    head, sep, url = value.partition("=")
    url = url.strip()
    if not sep or not url:
        raise MissingConfigurationKeyError(f"pack URL not found in {JVM_ARGS_KEY}={value!r}", key=JVM_ARGS_KEY)
    tokens = head.split(":")
    if len(tokens) < 2 or not tokens[1].strip():
        raise MissingConfigurationKeyError(f"java agent jar not found in {JVM_ARGS_KEY}={value!r}", key=JVM_ARGS_KEY)
    jar = tokens[1].strip()
    return JavaAgentSpec(jar_path=f"{game_directory}/{jar}", pack_url=url)


def read_java_agent(run_directory: Union[str, Path]) -> JavaAgentSpec:
    """
    Read the java agent of the instance whose game directory is `run_directory`.

    Raises
    ------
    MissingConfigurationKeyError
        If instance.cfg has no ``JvmArgs`` line or the line lacks a part.
    OSError
        If instance.cfg cannot be read.
    """
    game_directory = str(Path(run_directory).resolve())
    cfg = Path(game_directory) / INSTANCE_CFG
    prefix = JVM_ARGS_KEY + "="
    with open(cfg, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            line = line.rstrip("\r\n")
            if line.startswith(prefix):
                spec = parse_jvm_args(line[len(prefix):], game_directory)
                logger.debug("Java agent %s with pack %s", spec.jar_path, spec.pack_url)
                return spec
    raise MissingConfigurationKeyError(f"{JVM_ARGS_KEY} not found in {cfg}", key=JVM_ARGS_KEY)
