from __future__ import annotations

import typing as _typing


if _typing.TYPE_CHECKING:
    import os as _os
    import pathlib as _pathlib


PathLike = _typing.Union["_pathlib.Path", "_os.PathLike", str, bytes]


def slurp_bytes(path_or_file: PathLike | _typing.BinaryIO) -> bytes:
    import os as _os
    import pathlib as _pathlib

    if isinstance(path_or_file, (_pathlib.Path, str, bytes, _os.PathLike)):
        with open(path_or_file, "rb") as f:
            return f.read()
    else:
        return path_or_file.read()


def write_bytes(path: PathLike, content: bytes) -> None:
    with open(path, "wb") as f:
        f.write(content)
