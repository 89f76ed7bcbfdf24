import posixpath

from ._exceptions import VFSInvalidPathError


def validate_path(path: str) -> None:
    if not isinstance(path, str):
        raise TypeError(f"Virtual path must be str, not {type(path).__name__}")
    if "\x00" in path:
        raise VFSInvalidPathError(path, "embedded NUL byte")


def normalize_path(path: str) -> str:
    validate_path(path)
    converted = path.replace("\\", "/")
    if not converted:
        return "/"

    # Traversal check: simulate path resolution from root (depth 0)
    # relative paths are treated as if prepended with "/"
    parts = converted.split("/")
    depth = 0
    for part in parts:
        if part == "..":
            depth -= 1
            if depth < 0:
                raise VFSInvalidPathError(path, "traversal above the root")
        elif part and part != ".":
            depth += 1

    if not converted.startswith("/"):
        converted = "/" + converted
    normalized = posixpath.normpath(converted)
    # posixpath keeps a leading "//"
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def clean_mount_path(mount_path: str, physical_path: str) -> str:
    """Normalize a mount point; an empty one defaults to the physical base name."""
    mp = mount_path.replace("\\", "/").strip() if mount_path else ""
    if not mp:
        mp = posixpath.basename(physical_path.replace("\\", "/").rstrip("/"))
    return normalize_path("/" + mp)


def is_within(npath: str, root: str) -> bool:
    if root == "/":
        return npath.startswith("/")
    return npath == root or npath.startswith(root + "/")


def split_parts(npath: str) -> list[str]:
    return [p for p in npath.split("/") if p]
