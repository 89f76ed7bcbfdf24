"""Mount configuration.

A config file lists the mounts an application registers at startup::

    # embedfs.toml
    embedded_mode = false

    [[mounts]]
    virtual = "/static"
    physical = "public"

YAML files with the same shape are accepted. Relative physical paths are
resolved against the directory holding the config file.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ._vfs import VirtualFileSystem

log = logging.getLogger(__name__)

CONFIG_ENV_VAR = "EMBEDFS_CONFIG"
CONFIG_FILENAMES = ("embedfs.toml", "embedfs.yaml", "embedfs.yml")


@dataclass(frozen=True)
class MountConfig:
    virtual: str
    physical: Path


@dataclass(frozen=True)
class VFSConfig:
    mounts: tuple[MountConfig, ...] = field(default_factory=tuple)
    embedded_mode: bool = False
    debug: bool = False
    source: Path | None = None


def _find_config_file(explicit: Path | None) -> Path | None:
    if explicit is not None:
        return explicit

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.exists():
            return p

    cwd = Path.cwd()
    for name in CONFIG_FILENAMES:
        candidate = cwd / name
        if candidate.exists():
            return candidate
    return None


def _read_toml(p: Path) -> dict[str, Any]:
    with p.open("rb") as f:
        return tomllib.load(f)


def _read_yaml(p: Path) -> dict[str, Any]:
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML config must be a mapping at top-level: {p}")
    return data


def _parse_mounts(raw: Any, base_dir: Path) -> tuple[MountConfig, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValueError("'mounts' must be a list of tables")
    mounts: list[MountConfig] = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ValueError(f"'mounts[{i}]' must be a table")
        if "physical" not in entry:
            raise ValueError(f"'mounts[{i}].physical' is required")
        physical = Path(str(entry["physical"]))
        if not physical.is_absolute():
            physical = (base_dir / physical).resolve()
        mounts.append(MountConfig(virtual=str(entry.get("virtual", "")), physical=physical))
    return tuple(mounts)


def load_config(config_path: Path | None = None) -> VFSConfig:
    """Load mount configuration from TOML or YAML.

    Without an explicit path the file named by ``EMBEDFS_CONFIG`` is used,
    then ``embedfs.toml`` / ``embedfs.yaml`` / ``embedfs.yml`` in the
    current directory. No file at all yields an empty configuration.
    """
    file_path = _find_config_file(config_path)
    if file_path is None:
        return VFSConfig()

    if file_path.suffix.lower() == ".toml":
        raw = _read_toml(file_path)
    else:
        raw = _read_yaml(file_path)
    log.debug("Loaded config from %s", file_path)

    base_dir = file_path.resolve().parent
    return VFSConfig(
        mounts=_parse_mounts(raw.get("mounts"), base_dir),
        embedded_mode=bool(raw.get("embedded_mode", False)),
        debug=bool(raw.get("debug", False)),
        source=file_path,
    )


def build_vfs(config: VFSConfig) -> VirtualFileSystem:
    """Create a VirtualFileSystem with every configured mount registered."""
    vfs = VirtualFileSystem(embedded_mode=config.embedded_mode)
    for mc in config.mounts:
        vfs.add_mount(mc.virtual, mc.physical)
    return vfs
