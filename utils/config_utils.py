"""
Helpers to write JSON state files atomically and safely.

write_atomic_json(path, data) serializes first, writes to a temporary file in
the same directory, fsyncs and atomically replaces the target, all while
holding a `filelock.FileLock` on "<path>.lock" so that concurrent writers from
other processes are serialized.
"""
from pathlib import Path
import json
import os
import tempfile

from filelock import FileLock

LOCK_TIMEOUT_SECONDS = 10


def lock_for(path) -> FileLock:
    """Advisory lock guarding `path` (shared by readers and writers)."""
    return FileLock(str(path) + ".lock", timeout=LOCK_TIMEOUT_SECONDS)


def write_atomic_bytes(path, payload: bytes, mode: int = 0o600):
    """Atomically replace `path` with `payload`; the file ends up with `mode`."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(mode='wb', delete=False, dir=str(path.parent)) as tmpf:
        tmpf.write(payload)
        tmpf.flush()
        os.fsync(tmpf.fileno())
        tmp_name = tmpf.name
    try:
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, str(path))
    except OSError:
        os.unlink(tmp_name)
        raise


def write_atomic_json(path, data, indent=2, mode: int = 0o600):
    """Write JSON to `path` atomically under the path's file lock."""
    json_bytes = json.dumps(data, indent=indent, ensure_ascii=False).encode('utf-8')

    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with lock_for(path):
        write_atomic_bytes(path, json_bytes, mode=mode)


def read_json(path):
    """Read a JSON file; returns the parsed object or None if missing or unparsable."""
    if not Path(path).exists():
        return None
    try:
        with lock_for(path):
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError, UnicodeDecodeError):
        return None
