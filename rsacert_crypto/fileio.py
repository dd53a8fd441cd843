import os
import stat
import tempfile
from typing import BinaryIO, Union

PathLike = Union[str, "os.PathLike[str]"]


def read_all(source: Union[PathLike, BinaryIO]) -> bytes:
    """Read every byte from a path or a binary stream.

    A stream passed in is closed afterwards, whether or not the read succeeds.
    """
    if hasattr(source, "read"):
        with source:
            return source.read()
    with open(source, 'rb') as f:
        return f.read()


def write_all(destination: Union[PathLike, BinaryIO], data: bytes, *, private: bool = False) -> None:
    """Write *data* to a path or a binary stream.

    Paths are written through a temporary file and moved into place.
    ``private=True`` creates the file readable and writable by the owner only.
    """
    if hasattr(destination, "write"):
        destination.write(data)
        return

    destination = os.fspath(destination)
    directory, name = os.path.split(destination)
    # mkstemp creates a fresh file with mode 0600
    fd, tmp_path = tempfile.mkstemp(prefix=f".{name}.", suffix=".tmp", dir=directory or ".")
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        if not private:
            os.chmod(tmp_path, stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP | stat.S_IROTH)
        os.replace(tmp_path, destination)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
