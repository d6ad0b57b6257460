"""core/tuning.py — Data-driven generation constants.

Every terrain and spawn number lives in ``data/tuning.toml`` and is
loaded once at startup.  Any system can read a value with::

    from core.tuning import get
    attempts = get("spawn", "random_attempts", 30)

Code always passes the canonical value as *default*, and the shipped
TOML repeats those defaults, so generation is identical whether or not
``load()`` ran.  Changing a value changes every seed's output — bake
new NBT maps afterwards (``data/generate_zones.py``).

Hot-reload: call ``reload()`` to re-read the file.
"""

from __future__ import annotations
from pathlib import Path

try:
    import tomllib                         # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib                # pip install tomli


_data: dict = {}
_path: Path | None = None


def load(path: str | Path | None = None) -> None:
    """Load (or reload) tuning constants from *path*.

    If *path* is ``None``, default to ``data/tuning.toml`` relative to
    the project root (one level above ``core/``).
    """
    global _data, _path

    if path is None:
        root = Path(__file__).resolve().parent.parent
        path = root / "data" / "tuning.toml"
    else:
        path = Path(path)

    _path = path

    if not path.exists():
        print(f"[TUNING] {path} not found — using defaults")
        _data = {}
        return

    with open(path, "rb") as f:
        _data = tomllib.load(f)

    count = _count_leaves(_data)
    print(f"[TUNING] Loaded {count} values from {path}")


def reload() -> None:
    """Re-read the tuning file from disk (hot-reload)."""
    load(_path)


def reset() -> None:
    """Forget every loaded value (tests use this to get pure defaults)."""
    global _data, _path
    _data = {}
    _path = None


def get(section: str, key: str, default=None):
    """Read a tuning value.

    *section* uses dot-notation to traverse nested tables, e.g.
    ``"terrain.cave"`` looks up ``[terrain.cave]``.

    >>> get("terrain.cave", "smoothing_passes", 3)
    3
    """
    node = _data
    for part in section.split("."):
        if isinstance(node, dict):
            node = node.get(part)
        else:
            return default
        if node is None:
            return default
    if isinstance(node, dict):
        return node.get(key, default)
    return default


def _count_leaves(d: dict, _n: int = 0) -> int:
    for v in d.values():
        if isinstance(v, dict):
            _n = _count_leaves(v, _n)
        else:
            _n += 1
    return _n
