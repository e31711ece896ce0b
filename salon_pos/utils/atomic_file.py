"""File writes for exports and the action log."""
from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path

__all__ = ["atomic_write_text", "append_jsonl_atomic"]

_append_lock = threading.Lock()


def atomic_write_text(path, text: str, encoding: str = "utf-8") -> Path:
    """Replace ``path`` with ``text`` in one step; a reader sees the old file or the new one."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".part", dir=target.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as fh:
            fh.write(text)
            fh.flush()
            os.fsync(fh.fileno())
        tmp.replace(target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return target


def append_jsonl_atomic(path, obj, ensure_ascii: bool = False) -> None:
    """Append ``obj`` as one JSON line and fsync it.

    Appends from different threads are serialized so lines never interleave.
    """
    target = Path(path)
    line = json.dumps(obj, ensure_ascii=ensure_ascii, default=str) + "\n"
    with _append_lock:
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("a", encoding="utf-8", newline="\n") as fh:
            fh.write(line)
            fh.flush()
            os.fsync(fh.fileno())
