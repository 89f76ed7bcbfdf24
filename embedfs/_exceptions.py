import errno


class VFSInvalidPathError(OSError):
    """Raised for a malformed virtual path. Subclass of OSError (EINVAL)."""
    def __init__(self, path: str, reason: str) -> None:
        self.reason = reason
        super().__init__(errno.EINVAL, f"Invalid virtual path: {reason}", path)


class VFSMountExistsError(FileExistsError):
    """Raised when a virtual root is registered twice. Subclass of FileExistsError."""
    def __init__(self, mount_path: str) -> None:
        super().__init__(errno.EEXIST, "VFS mount already exists", mount_path)


class VFSMountNotFoundError(FileNotFoundError):
    """Raised when no mount owns a virtual path. Subclass of FileNotFoundError."""
    def __init__(self, path: str) -> None:
        super().__init__(errno.ENOENT, "VFS mount does not exist", path)


class VFSPhysicalRootError(OSError):
    """Raised when a mount's physical root is missing or not a directory."""
    def __init__(self, physical_path: str, code: int = errno.ENOENT) -> None:
        if code == errno.ENOTDIR:
            message = "Physical root is not a directory"
        else:
            message = "Physical root does not exist"
        super().__init__(code, message, physical_path)


def is_not_exist(err: BaseException) -> bool:
    """Return True when *err* means neither the tree nor the disk has the path."""
    return isinstance(err, FileNotFoundError)
