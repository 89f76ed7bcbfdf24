from ._config import MountConfig, VFSConfig, build_vfs, load_config
from ._exceptions import (
    VFSInvalidPathError,
    VFSMountExistsError,
    VFSMountNotFoundError,
    VFSPhysicalRootError,
    is_not_exist,
)
from ._handle import NodeFile, OSFile, VFSFile
from ._mount import Mount
from ._node import DirNode, FileNode, NodeInfo, NodeTree
from ._text import VFSTextHandle
from ._typing import FileSystem, VFSStats
from ._vfs import VirtualFileSystem

__all__ = [
    "VirtualFileSystem",
    "Mount",
    "NodeTree",
    "NodeInfo",
    "DirNode",
    "FileNode",
    "VFSFile",
    "NodeFile",
    "OSFile",
    "VFSTextHandle",
    "FileSystem",
    "VFSStats",
    "VFSConfig",
    "MountConfig",
    "load_config",
    "build_vfs",
    "VFSInvalidPathError",
    "VFSMountExistsError",
    "VFSMountNotFoundError",
    "VFSPhysicalRootError",
    "is_not_exist",
]
__version__ = "0.1.0"
