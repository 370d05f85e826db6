import os
import tempfile
from datetime import datetime
from pathlib import Path


def write_atomic(path: Path, payload: bytes) -> None:
    """Write payload to a temp file beside path, then swap it into place."""
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        try: os.unlink(tmp)
        except OSError: pass
        raise


def quarantine(path: Path) -> Path:
    """Move an unreadable file aside as <name>.corrupt-<stamp> and return the new path."""
    stamp = datetime.now().strftime("%Y%m%d%H%M%S")
    target = path.with_name(f"{path.name}.corrupt-{stamp}")
    n = 1
    while target.exists():
        target = path.with_name(f"{path.name}.corrupt-{stamp}-{n}"); n += 1
    os.replace(path, target)
    return target
