# src/fibnum/cli.py

"""
Fibonacci numbers beyond machine-integer range.

Description:
    Computes F(n) (F0=0, F1=1) with a limb-based bignum and prints the exact
    decimal value. Single terms, inclusive ranges, optional cross-checking
    against gmpy2 or sympy, TOML profiles and an interactive prompt.

usage: see fibnum -h
"""

from __future__ import annotations

import argparse
import faulthandler
import os
import sys
import textwrap
import threading
import time
import traceback
from importlib.resources import files as pkg_files
from typing import NamedTuple

from colorama import Fore, Style
from colorama import init as colorama_init

from fibnum import __version__ as _ver
from fibnum import config as CONFIG
from fibnum.bignum import destroy
from fibnum.fibonacci import METHODS, fibonacci, fibonacci_terms
from fibnum.fmt import format_term, to_decimal_string
from fibnum.output_manager import OutputManager, run_filename
from fibnum.runtime import APPLY, CFG, debug
from fibnum.runtime import current as _rt_current
from fibnum.utility import (
    UserInputError,
    check_index,
    flatten_dotted,
    parse_index,
    parse_range,
    typename,
    validate_output_setting,
)
from fibnum.verify import check_term, oracle
from fibnum.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir


# In memory session history
class HistoryItem(NamedTuple):
    first: int
    last: int
    profile: str | None
    timestamp: float


_HISTORY: list[HistoryItem] = []
_TWO_ARGS = 2


def add_to_history(first: int, last: int, profile: str | None = None) -> None:
    _HISTORY.append(HistoryItem(first=first, last=last, profile=profile, timestamp=time.time()))


def get_history() -> list[HistoryItem]:
    return list(_HISTORY)


def _install_loud_error_handlers(debug_on: bool) -> None:
    if not debug_on:
        return
    faulthandler.enable()

    def _excepthook(exc_type, exc, tb):
        sys.stderr.write("\n[UNCAUGHT EXCEPTION]\n")
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)
        sys.stderr.flush()
    sys.excepthook = _excepthook

    def _thread_excepthook(args):
        sys.stderr.write("\n[UNCAUGHT THREAD EXCEPTION]\n")
        traceback.print_exception(args.exc_type, args.exc_value, args.exc_traceback, file=sys.stderr)
        sys.stderr.flush()
    threading.excepthook = _thread_excepthook


def _print_user_error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    prefix = f"{Fore.RED}Error:{Style.RESET_ALL}"
    if msg.startswith("Invalid input:"):
        msg = msg.replace("Invalid input:", f"{Fore.RED}Invalid input:{Style.RESET_ALL}", 1)
    elif not msg.startswith("Error:"):
        msg = f"{prefix} {msg}"
    print(msg, file=sys.stderr)


def _parse_request(text: str) -> tuple[int, int] | None:
    """'n' -> (n, n); 'a-b' / 'a..b' -> (a, b); anything else -> None."""
    rng = parse_range(text)
    if rng is not None:
        return rng
    n = parse_index(text)
    return (n, n) if n is not None else None


def _resolve_inputs(items: list[str]) -> tuple[str | None, tuple[int, int] | None]:
    """Return (profile, request) based on the first two positionals.

    Rules:
      - one item: request if it parses as n / a-b, else profile (or command)
      - two items: 'profile request' or 'request profile'; two requests -> the first
    """
    if not items:
        return None, None

    if len(items) == 1:
        req = _parse_request(items[0])
        return (None, req) if req is not None else (items[0], None)

    a, b = items[0], items[1]
    ra, rb = _parse_request(a), _parse_request(b)
    if ra is not None and rb is None:
        return b, ra
    if ra is None and rb is not None:
        return a, rb
    if ra is not None:
        return None, ra
    return a, None


# ---- compute & print ----

def run_request(
    first: int,
    last: int,
    *,
    om: OutputManager,
    method: str | None = None,
    verify: bool = False,
    abbreviate: bool | None = None,
) -> int:
    """
    Print F(first) .. F(last) through `om`.
    Returns the number of verification mismatches (0 when verify is off).
    """
    check_index(first)
    check_index(last)

    reference = oracle() if verify else None
    if verify and reference is None:
        raise UserInputError("verification library is not installed.")

    if first == last:
        terms = [(first, fibonacci(first, method))]
    else:
        debug(f"range F({first})..F({last}) via rolling sums")
        terms = fibonacci_terms(first, last)

    mismatches = 0
    for n, bn in terms:
        digits = to_decimal_string(bn)
        destroy(bn)
        om.write(format_term(n, digits, abbreviate=abbreviate))
        if reference is None:
            continue
        expected = check_term(n, digits, reference)
        if expected is None:
            debug(f"F({n}) verified ({len(digits)} digits)")
        else:
            mismatches += 1
            print(f"{Fore.RED}{Style.BRIGHT}MISMATCH{Style.RESET_ALL} F({n}): expected {expected}", file=sys.stderr)
    return mismatches


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    commands:
      init
          Create the workspace and copy the packaged profiles if missing.

      init overwrite
          Meant for developers. Requires environment variable FIBNUM_DEV=1.
          Replaces the workspace profiles with the packaged ones.

      profiles
          List the available profiles.

      where
          Show the workspace and package paths.

    examples:
      fibnum 100            F(100)
      fibnum 0-20           F(0) .. F(20)
      fibnum doubling 4000  F(4000) using the 'doubling' profile
    """)

    p = argparse.ArgumentParser(
        description="fibnum — exact Fibonacci numbers with a limb-based bignum",
        usage=(
            "fibnum [[profile] [n | a-b]] [--method M] [--verify] [--abbrev] [--output OUTPUT] [--quiet] [--debug]\n"
            "       fibnum -h | --help\n"
            "       fibnum init [overwrite] | profiles | where\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("items", nargs="*", metavar="[profile] [n | a-b]",
                   help="optional profile name followed by an index or an inclusive range")
    p.add_argument("--range", nargs=2, type=int, metavar=("A", "B"), default=None,
                   help="Print F(A) .. F(B)")
    p.add_argument("--method", choices=sorted(METHODS), default=None,
                   help="Generator for single terms (default: profile FIBONACCI.METHOD)")
    p.add_argument("--profile", default=None, help="Profile to load from the workspace")
    p.add_argument("--verify", action="store_true", help="Cross-check every term against gmpy2 / sympy")
    p.add_argument("--abbrev", action="store_true", help="Abbreviate long results")
    p.add_argument("--output", default=None, help="Write results to a file (also prints unless --quiet)")
    p.add_argument("--quiet", action="store_true", help="Suppress screen output")
    p.add_argument("--debug", action="store_true", help="Show profile settings and internal trace info")
    p.add_argument("--version", action="version", version=f"fibnum {_ver}")
    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    try:
        return _main_impl(argv)
    except UserInputError as e:
        _print_user_error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        if "--debug" in (argv if argv is not None else sys.argv):
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


def _select_profile_name(explicit: str | None) -> str:
    """explicit → last used (from workspace) → 'default'"""
    if explicit:
        return explicit
    last = CONFIG.read_current_profile()
    if last and CONFIG.has_profile(last):
        return last
    return "default"


def _apply_profile(name: str) -> None:
    selected = CONFIG.load_settings(name)
    APPLY(selected)

    # verification libraries stringify through int; follow the profile's digit limit
    limit = int(CFG("BEHAVIOUR.MAX_DIGITS", 100_000))
    if not os.environ.get("PYTHONINTMAXSTRDIGITS"):
        try:
            sys.set_int_max_str_digits(limit)
        except ValueError:
            raise UserInputError(f"BEHAVIOUR.MAX_DIGITS must be 0 or >= 640, got {limit}.") from None

    if not _rt_current().debug:
        return
    print(f"[debug] active profile: {selected.name}", file=sys.stderr)
    if selected._source:
        print(f"[debug] profile file: {selected._source}", file=sys.stderr)
    print("[debug] runtime settings (flattened):", file=sys.stderr)
    flat = flatten_dotted(_rt_current().settings)
    for k in sorted(flat, key=str.lower):
        v = flat[k]
        print(f"        {k:.<40} {v!r} ({typename(v)})", file=sys.stderr)
    print(file=sys.stderr)


def _print_profiles() -> None:
    current = _rt_current().profile_name
    for name, desc in CONFIG.list_profiles_with_descriptions():
        mark = f"{Fore.GREEN}*{Style.RESET_ALL}" if name == current else " "
        print(f" {mark} {Fore.YELLOW}{name:<16}{Style.RESET_ALL} {desc}")


def _print_repl_help() -> None:
    print(textwrap.dedent(f"""\
        {Style.BRIGHT}Commands{Style.RESET_ALL}
          n                 print F(n)
          a-b  or  a..b     print F(a) .. F(b)
          <profile>         switch profile
          p                 list profiles
          method [name]     show or set the generator ({', '.join(METHODS)})
          verify on|off     cross-check results
          debug on|off      toggle debug output
          hist              session history
          q                 quit"""))


# ---- main ----
def _main_impl(argv=None) -> int:

    colorama_init(autoreset=True)

    parser = _build_parser()
    args = parser.parse_args(argv)
    rt = _rt_current()
    rt.debug = bool(args.debug)

    _install_loud_error_handlers(args.debug)

    ensure_workspace_seeded()

    profile, request = _resolve_inputs(args.items)
    if args.range is not None:
        lo, hi = args.range
        if hi < lo:
            raise UserInputError(f"Invalid input: empty range {lo}..{hi}.")
        request = (lo, hi)

    if profile == "init":
        if len(args.items) == _TWO_ARGS and args.items[1] == "overwrite":
            if os.environ.get("FIBNUM_DEV") != "1":
                print("Refusing to overwrite: set FIBNUM_DEV=1 to enable developer overwrite.")
                return 2
            ws, copied = seed_workspace(overwrite=True)
            print(f"Workspace ready at: {ws} (overwrote existing profiles)")
        else:
            ws, copied = seed_workspace(overwrite=False)
            print(f"Workspace ready at: {ws}")
        print(f"Copied -> profiles: {copied}")
        return 0

    if profile == "where":
        print(f"Workspace: {workspace_dir()}")
        print(f"Package:   {pkg_files('fibnum')}")
        return 0

    if profile == "profiles":
        _print_profiles()
        return 0

    if profile == "active":
        print(f"Active profile: {CONFIG.read_current_profile() or 'default'}")
        return 0

    explicit = args.profile or profile
    if explicit and not CONFIG.has_profile(explicit):
        print(f"Unknown profile: '{explicit}'", file=sys.stderr)
        print("Available profiles:", ", ".join(CONFIG.list_all_profiles()), file=sys.stderr)
        return 2

    profile_name = _select_profile_name(explicit)
    if CONFIG.has_profile(profile_name):
        _apply_profile(profile_name)
    else:
        debug(f"profile '{profile_name}' missing, running on built-in defaults")
    if args.debug:
        rt.debug = True  # --debug wins over the profile

    try:
        cli_target = validate_output_setting(args.output)
    except ValueError as e:
        print(f"Fatal error in --output: {e}", file=sys.stderr)
        return 1

    abbreviate = True if args.abbrev else None

    def make_output_manager(first: int, last: int) -> OutputManager:
        target = cli_target if cli_target is not None else CFG("OUTPUT.OUTPUT_FILE", None)
        return OutputManager(output_file=target, quiet=args.quiet, label=run_filename(first, last))

    # --- one-shot path ---
    if request is not None:
        first, last = request
        with make_output_manager(first, last) as om:
            bad = run_request(first, last, om=om, method=args.method, verify=args.verify, abbreviate=abbreviate)
        if om.target:
            debug(f"results written to {om.target}")
        return 1 if bad else 0

    # --- REPL ---
    print(f"{Fore.YELLOW}{Style.BRIGHT}fibnum v{_ver} — exact Fibonacci numbers{Style.RESET_ALL}")

    current_profile = _rt_current().profile_name
    method = args.method
    verify = args.verify
    while True:
        try:
            prompt = f"\nProfile: {current_profile} — Enter n, a-b, or a profile (h=Help, q=Quit): "
            user_input = input(prompt).strip()

            low = user_input.lower()
            if low in {"", "q", "quit"}:
                break

            if low in {"h", "help"}:
                _print_repl_help()
                continue

            if low in {"p", "profiles"}:
                _print_profiles()
                continue

            if low in {"hist", "history"}:
                hist = get_history()
                if not hist:
                    print("History is empty.")
                for item in hist:
                    ts = time.strftime("%H:%M:%S", time.localtime(item.timestamp))
                    span = f"{item.first}" if item.first == item.last else f"{item.first}..{item.last}"
                    print(f"{ts}  n={span:<15}  profile={item.profile or '-'}")
                continue

            parts = low.split()
            if parts[0] == "method":
                if len(parts) == 1:
                    print(f"Method: {method or CFG('FIBONACCI.METHOD', 'iterative')}")
                elif parts[1] in METHODS:
                    method = parts[1]
                    print(f"Method set to {method}.")
                else:
                    print(f"Usage: METHOD [{'|'.join(METHODS)}]")
                continue

            if parts[0] in {"verify", "debug"}:
                rt = _rt_current()
                state = verify if parts[0] == "verify" else rt.debug
                if len(parts) == 1 or parts[1] == "status":
                    print(f"{parts[0].capitalize()} is currently {'ON' if state else 'OFF'}.")
                    continue
                if parts[1] not in {"on", "off"}:
                    print(f"Usage: {parts[0].upper()} [on|off|status]")
                    continue
                if parts[0] == "verify":
                    verify = parts[1] == "on"
                else:
                    rt.debug = parts[1] == "on"
                print(f"{parts[0].capitalize()} {'enabled' if parts[1] == 'on' else 'disabled'} for this session.")
                continue

            try:
                req = _parse_request(user_input)
            except UserInputError as e:
                _print_user_error(str(e))
                continue

            if req is not None:
                first, last = req
                try:
                    with make_output_manager(first, last) as om:
                        run_request(first, last, om=om, method=method, verify=verify, abbreviate=abbreviate)
                    add_to_history(first, last, current_profile)
                except UserInputError as e:
                    _print_user_error(str(e))
                continue

            if CONFIG.has_profile(user_input):
                try:
                    _apply_profile(user_input)
                    CONFIG.write_current_profile(user_input)
                    current_profile = user_input
                    print(f"Applied profile: {current_profile}")
                except (UserInputError, OSError) as e:
                    print(f"{Fore.RED}Failed to load profile {Style.RESET_ALL}'{user_input}': {e}", file=sys.stderr)
                continue

            print(f"{Fore.RED}Invalid input: {Style.RESET_ALL}'{user_input}'. Type H for help.")
        except (EOFError, KeyboardInterrupt):
            print()
            break
        except Exception as e:
            if _rt_current().debug:
                traceback.print_exc()
            else:
                _print_user_error(f"{e.__class__.__name__}: {e}")
            continue

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
