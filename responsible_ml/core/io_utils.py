from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Union

import pandas as pd


def write_atomic(path: Union[str, Path], data: Union[str, bytes]) -> None:
    """Atomically write data to path using a temporary file and os.replace.

    If data is str, it is encoded as UTF-8.
    """
    path = str(path)
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=".tmp_", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            if isinstance(data, str):
                f.write(data.encode("utf-8"))
            else:
                f.write(data)
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def write_frame(path: Union[str, Path], frame: pd.DataFrame, index: bool = False) -> str:
    """Write a DataFrame as CSV through write_atomic and return the path."""
    write_atomic(path, frame.to_csv(index=index))
    return str(path)


def slugify(label: str) -> str:
    """File-name friendly version of a model label."""
    keep = [c.lower() if c.isalnum() else "_" for c in str(label)]
    return "_".join(part for part in "".join(keep).split("_") if part) or "model"
