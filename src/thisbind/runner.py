from __future__ import annotations

import sys
import traceback
from pathlib import Path
from typing import List, Optional, Tuple

from lark import Tree

from .demos import DEMOS, get_demo, run_demo
from .evaluator import eval_program, last_is_expression
from .parser import ParseError, parse_source
from .realm import Realm
from .runtime import ResolverMode, init_stdlib
from .types import UNDEFINED, TbValue, ThisbindError
from .utils import debug_py_trace_enabled, inspect

def run(src: str, realm: Optional[Realm] = None) -> TbValue:
    """Parse and evaluate *src*, then run deferred callbacks; returns the last statement's value."""
    init_stdlib()

    if realm is None:
        realm = Realm()

    tree = parse_source(src)
    realm.frame.source = src
    result = eval_program(tree, realm.frame)
    realm.scheduler.drain()

    return result

def capture(src: str, mode: Optional[ResolverMode] = None) -> List[str]:
    """Run *src* in a fresh realm with instant timers and return the console lines."""
    with Realm(mode=mode, time_scale=0.0) as realm:
        run(src, realm=realm)
        return list(realm.console.lines)

def repl_eval(src: str, realm: Realm) -> Tuple[TbValue, bool]:
    """Evaluate one REPL entry. Returns (value, is_statement)."""
    tree: Tree = parse_source(src)
    realm.frame.source = src
    result = eval_program(tree, realm.frame)
    realm.scheduler.drain()

    return result, not last_is_expression(tree)

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.exists():
        return candidate.read_text(encoding="utf-8")

    return arg

def _report_error(exc: BaseException) -> None:
    print(f"Error: {exc}", file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        traceback.print_exception(exc, file=sys.stderr)

def _run_demo_cli(name: str, mode: Optional[ResolverMode]) -> int:
    demo = get_demo(name)
    if demo is None:
        print(f"Unknown demo: {name} (try --list-demos)", file=sys.stderr)
        return 1

    if mode is not None and mode is not demo.mode:
        print(f"[INFO] demo '{name}' always runs in {demo.mode.value} mode", file=sys.stderr)

    print(f"# {demo.title}")
    lines = run_demo(demo, echo=True)

    if tuple(lines) != demo.expected:
        print("Output differs from the expected lines:", file=sys.stderr)
        for line in demo.expected:
            print(f"  {line}", file=sys.stderr)
        return 1

    return 0

def main(argv: Optional[List[str]] = None) -> int:
    mode: Optional[ResolverMode] = None
    demo_name: Optional[str] = None
    arg: Optional[str] = None
    want_repl = False
    it = iter(sys.argv[1:] if argv is None else argv)

    for token in it:
        if token == "--strict":
            mode = ResolverMode.STRICT
            continue

        if token == "--repl":
            want_repl = True
            continue

        if token == "--list-demos":
            for demo in DEMOS.values():
                print(f"{demo.name:<12} {demo.title}")
            return 0

        if token.startswith("--demo="):
            demo_name = token.split("=", 1)[1]
            continue

        if token == "--demo":
            try:
                demo_name = next(it)
            except StopIteration:
                raise SystemExit("--demo flag requires a name") from None
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    try:
        if demo_name is not None:
            return _run_demo_cli(demo_name, mode)

        if want_repl:
            from .repl import repl
            repl(mode=mode)
            return 0

        source = _load_source(arg or "-")

        with Realm(mode=mode, echo=True) as realm:
            result = run(source, realm=realm)

        if result is not UNDEFINED:
            print(inspect(result))
    except (ParseError, ThisbindError) as exc:
        _report_error(exc)
        return 1

    return 0

if __name__ == "__main__":
    sys.exit(main())
