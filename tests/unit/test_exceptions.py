import errno

import pytest
from embedfs import (
    VFSInvalidPathError,
    VFSMountExistsError,
    VFSMountNotFoundError,
    VFSPhysicalRootError,
    is_not_exist,
)


def test_invalid_path_is_oserror_einval():
    err = VFSInvalidPathError("/a\x00", "embedded NUL byte")
    assert isinstance(err, OSError)
    assert err.errno == errno.EINVAL
    assert err.filename == "/a\x00"
    assert err.reason == "embedded NUL byte"


def test_mount_exists_is_file_exists():
    err = VFSMountExistsError("/static")
    assert isinstance(err, FileExistsError)
    assert err.errno == errno.EEXIST
    assert err.filename == "/static"


def test_mount_not_found_is_not_exist():
    err = VFSMountNotFoundError("/nowhere")
    assert isinstance(err, FileNotFoundError)
    assert is_not_exist(err)


@pytest.mark.parametrize(
    "code, message",
    [
        (errno.ENOENT, "Physical root does not exist"),
        (errno.ENOTDIR, "Physical root is not a directory"),
    ],
)
def test_physical_root_error(code, message):
    err = VFSPhysicalRootError("/srv/x", code)
    assert err.errno == code
    assert err.strerror == message
    assert not is_not_exist(err)


def test_is_not_exist_rejects_other_errors():
    assert is_not_exist(FileNotFoundError(errno.ENOENT, "x"))
    assert not is_not_exist(IsADirectoryError(errno.EISDIR, "x"))
    assert not is_not_exist(VFSInvalidPathError("/x", "bad"))
    assert not is_not_exist(ValueError("x"))
