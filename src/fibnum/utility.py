# -----------------------------------------------------------------------------
#  Utility functions
# -----------------------------------------------------------------------------

from __future__ import annotations

import os
import re

from fibnum.runtime import CFG

DEFAULT_MAX_INDEX = 5_000

_RANGE_RE = re.compile(r"^\s*(\d[\d_]*)\s*(?:-|\.\.)\s*(\d[\d_]*)\s*$")


class UserInputError(Exception):
    pass


def max_index() -> int:
    try:
        return int(CFG("FIBONACCI.MAX_INDEX", DEFAULT_MAX_INDEX))
    except (TypeError, ValueError):
        return DEFAULT_MAX_INDEX


def check_index(n: int, label: str = "index") -> int:
    """Reject negative indices and indices above FIBONACCI.MAX_INDEX."""
    if n < 0:
        raise UserInputError(f"Invalid input: {label} must be >= 0, got {n}.")
    limit = max_index()
    if n > limit:
        raise UserInputError(
            f"{label} {n} is above the limit of {limit}. "
            "Increase FIBONACCI.MAX_INDEX in the profile or pass a smaller value."
        )
    return n


def parse_index(text: str) -> int | None:
    """Return the integer in `text` (underscores allowed), or None if it is not one."""
    s = (text or "").strip().replace("_", "")
    if not s:
        return None
    if s.startswith("-") and s[1:].isdigit():
        raise UserInputError(f"Invalid input: negative index {s}.")
    return int(s) if s.isdigit() else None


def parse_range(text: str) -> tuple[int, int] | None:
    """Parse 'a-b' or 'a..b' into (a, b); None when `text` is not a range."""
    m = _RANGE_RE.match(text or "")
    if not m:
        return None
    lo, hi = (int(g.replace("_", "")) for g in m.groups())
    if hi < lo:
        raise UserInputError(f"Invalid input: empty range {lo}..{hi}.")
    return lo, hi


def validate_output_setting(output_file: str | None) -> str | None:
    """
    Validate output setting.
    - None / "" => ok (screen only)
    - "." / "./" / trailing "/" => ok (one file per run in that directory)
    - path/to/file => must not be a reserved name or a source/config extension
    Returns the output_file, or raises ValueError.
    """
    FORBIDDEN_FILENAMES = {
        ".gitignore",
        "LICENSE",
        "pyproject.toml",
        # Windows reserved device names (case-insensitive on Windows)
        "con", "prn", "aux", "nul",
        "com1", "com2", "com3", "com4", "com5", "com6", "com7", "com8", "com9",
        "lpt1", "lpt2", "lpt3", "lpt4", "lpt5", "lpt6", "lpt7", "lpt8", "lpt9",
    }

    FORBIDDEN_EXTENSIONS = {".py", ".md", ".toml"}

    if not output_file:
        return output_file

    if output_file in (".", "./") or output_file.endswith("/"):
        return output_file

    basename = os.path.basename(output_file)
    name_no_ext, ext = os.path.splitext(basename)
    ext = ext.lower()

    if basename.lower() in FORBIDDEN_FILENAMES or name_no_ext.lower() in FORBIDDEN_FILENAMES:
        raise ValueError(f"Forbidden output filename: {basename}")

    if ext in FORBIDDEN_EXTENSIONS:
        raise ValueError(f"Forbidden output file extension: {ext}")

    return output_file


def typename(v: object) -> str:
    return type(v).__name__


def flatten_dotted(d: dict, prefix: str = "") -> dict[str, object]:
    out: dict[str, object] = {}
    for k, v in (d or {}).items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out
