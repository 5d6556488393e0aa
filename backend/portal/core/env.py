"""Process configuration loader.

Configuration is environment-only. Local development may keep values in a
`.env` file at the repository root or under `backend/`; those are merged into
`os.environ` without clobbering variables the process runner already set.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional


# backend/portal/core/env.py -> core -> portal -> backend -> repo root
REPO_ROOT = Path(__file__).resolve().parents[3]


def _parse_env_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    if "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    value = value.strip()
    if not key:
        return None
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1]
    return key, value


def env_file_candidates() -> list[Path]:
    return [REPO_ROOT / ".env", REPO_ROOT / "backend" / ".env"]


def load_env_if_present(*, override: bool = False, paths: Optional[Iterable[Path]] = None) -> int:
    """Merge `.env` files into the process environment.

    Returns the number of variables that were set. Unreadable files are skipped.
    """
    loaded = 0
    for p in paths if paths is not None else env_file_candidates():
        if not p.is_file():
            continue
        try:
            content = p.read_text(encoding="utf-8")
        except OSError:
            continue
        for raw in content.splitlines():
            parsed = _parse_env_line(raw)
            if parsed is None:
                continue
            k, v = parsed
            if not override and k in os.environ:
                continue
            os.environ[k] = v
            loaded += 1
    return loaded


def get_positive_int(name: str, default: int) -> int:
    """Read a strictly positive integer setting, failing loudly on bad input."""
    raw = os.environ.get(name, str(default))
    try:
        n = int(raw)
    except ValueError as e:
        raise RuntimeError(f"Invalid {name}; must be integer.") from e
    if n <= 0:
        raise RuntimeError(f"{name} must be > 0.")
    return n
