# runtime.py
from __future__ import annotations

import sys
from contextvars import ContextVar
from dataclasses import dataclass, field
from importlib.util import find_spec
from typing import Any

from colorama import Fore, Style


@dataclass
class Runtime:
    profile_name: str = "default"
    settings: dict[str, Any] = field(default_factory=dict)
    debug: bool = False  # controls verbosity / tracebacks

    def apply(self, settings: Any) -> None:
        self.profile_name = (
            getattr(settings, "name", None)
            or getattr(settings, "_source", None)
            or "default"
        )

        cfg = settings.as_dict() if hasattr(settings, "as_dict") else settings
        self.settings = dict(cfg)

        dbg = self.get("BEHAVIOUR.DEBUG", None)
        if isinstance(dbg, bool):
            self.debug = dbg

    def get(self, key: str, default: Any = None) -> Any:
        """Support dotted lookups, e.g., 'FIBONACCI.METHOD'."""
        if not key:
            return default
        cur = self.settings
        if "." in key:
            for part in key.split("."):
                if isinstance(cur, dict) and part in cur:
                    cur = cur[part]
                else:
                    return default
            return cur
        return cur.get(key, default)


# --- Context management ---

_current_runtime: ContextVar[Runtime | None] = ContextVar("fibnum_runtime", default=None)


def current() -> Runtime:
    rt = _current_runtime.get()
    if rt is None:
        rt = Runtime()
        _current_runtime.set(rt)
    return rt


def reset() -> Runtime:
    """Install a fresh Runtime in the current context (used by tests and the REPL)."""
    rt = Runtime()
    _current_runtime.set(rt)
    return rt


def APPLY(settings: Any) -> None:
    current().apply(settings)


def CFG(key: str, default: Any = None) -> Any:
    return current().get(key, default)


def debug(msg: str) -> None:
    """One dim '[debug]' line on stderr, only when the runtime debug flag is on."""
    if not current().debug:
        return
    sys.stderr.write(f"{Style.DIM}[debug]{Style.RESET_ALL} {msg}\n")
    sys.stderr.flush()


# ---- Dependency check --------------------------------------------------------

def ensure_runtime_deps(required: tuple[str, ...], strict: bool = True) -> bool:
    """
    Verify optional runtime deps are importable without importing them.
    If strict=True, prints a friendly error and returns False when missing.
    """
    missing = [name for name in required if find_spec(name) is None]

    if not missing:
        return True

    msg = (
        f"{Fore.RED}{Style.BRIGHT}\nMissing dependencies:{Style.RESET_ALL} "
        + ", ".join(missing)
        + "\nInstall with: "
        + f"{Fore.YELLOW}pip install " + " ".join(missing) + f"{Style.RESET_ALL}"
    )
    print(msg, file=sys.stderr)
    return not strict
