# output_manager.py

import os
import re

from fibnum.fmt import strip_ansi
from fibnum.workspace import workspace_dir

_SAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._=-]+")


def resolve_output_path(path: str, workspace_root: str) -> str:
    """
    Resolve user-provided output path.

    Rules:
    - '~' expanded to user home
    - Absolute paths unchanged
    - Relative paths are relative to workspace_root
    """
    if not path:
        raise ValueError("Output path is empty")

    path = os.path.expanduser(path)
    if os.path.isabs(path):
        return os.path.normpath(path)
    return os.path.normpath(os.path.join(workspace_root, path))


def _next_available_path(path: str) -> str:
    """
    If `path` does not exist, return it.
    Otherwise return path with _2, _3, ... inserted before the extension.
    """
    if not os.path.exists(path):
        return path

    base, ext = os.path.splitext(path)
    i = 2
    while True:
        candidate = f"{base}_{i}{ext}"
        if not os.path.exists(candidate):
            return candidate
        i += 1


def run_filename(first: int, last: int | None = None, ext: str = ".txt") -> str:
    """'F100.txt' for one term, 'F0-F100.txt' for a range."""
    stem = f"F{first}" if last is None or last == first else f"F{first}-F{last}"
    return _SAFE_CHARS_RE.sub("_", stem) + ext


class OutputManager:
    """
    Handles all printing/output, including to screen and/or file.

    Usage:
        # Split mode (one file per run):
        om = OutputManager(output_file="results/", label="F0-F100.txt")
        om.write("F(0) = 0")   # prints and buffers; file written on close()
        om.close()

        # Single file (append all runs to one file):
        om = OutputManager(output_file="results/all.txt")
        om.write("F(0) = 0")   # prints and appends
        om.close()
    """

    def __init__(self, output_file: str | None = None, quiet: bool = False, label: str | None = None):
        """
        Parameters:
            output_file:
                None or ""       => screen only
                "." or "./"      => one file per run in the workspace
                endswith "/"     => one file per run in the given directory
                path/to/file.txt => append all runs to this file
            quiet: if True, no output to screen (only to file)
            label: filename used in split mode
        """
        self.quiet = quiet
        self.output_file = output_file or ""
        self._buffer: list[str] = []

        self._mode: str = "none"     # "none" | "split" | "single"
        self._split_path: str | None = None
        self._single_path: str | None = None

        if self.output_file in (".", "./") or self.output_file.endswith("/"):
            if not label:
                raise ValueError("A label must be provided when outputting to a directory.")
            directory = resolve_output_path(self.output_file, str(workspace_dir()))
            os.makedirs(directory, exist_ok=True)
            self._mode = "split"
            self._split_path = _next_available_path(os.path.join(directory, label))

        elif self.output_file:
            path = resolve_output_path(self.output_file, str(workspace_dir()))
            parent = os.path.dirname(path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            self._mode = "single"
            self._single_path = path

    @property
    def target(self) -> str | None:
        return self._split_path or self._single_path

    def write(self, *args, sep: str = " ", end: str = "\n") -> None:
        """Write to screen and file (if configured)."""
        text = sep.join(str(a) for a in args) + end
        self._buffer.append(text)

        if not self.quiet:
            print(text, end="")

        if self._mode == "single" and self._single_path:
            with open(self._single_path, "a", encoding="utf-8") as fh:
                fh.write(strip_ansi(text))

    def close(self) -> None:
        """Flush buffered output (split mode) or add a run separator (single-file mode)."""
        if not self._buffer:
            return

        if self._mode == "split" and self._split_path:
            with open(self._split_path, "w", encoding="utf-8") as fh:
                fh.write(strip_ansi("".join(self._buffer)))
            self._buffer.clear()
            return

        if self._mode == "single" and self._single_path:
            with open(self._single_path, "a", encoding="utf-8") as fh:
                fh.write("\n")
            self._buffer.clear()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
