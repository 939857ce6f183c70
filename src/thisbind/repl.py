"""Interactive REPL for thisbind, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
import traceback
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .parser import ParseError
from .realm import Realm
from .runner import repl_eval
from .runtime import ResolverMode
from .types import UNDEFINED, ThisbindError
from .utils import debug_py_trace_enabled, inspect

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the global context", ""),
    "/strict": ("Toggle strict default binding", "[on|off]"),
}

_OPEN = {"(": ")", "[": "]", "{": "}"}
_CLOSE = {")", "]", "}"}

def bracket_depth(text: str) -> int:
    """Unclosed bracket count, ignoring strings and // comments."""
    depth = 0
    quote: Optional[str] = None
    escaped = False
    i = 0

    while i < len(text):
        ch = text[i]

        if quote is not None:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote or ch == "\n":
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif text.startswith("//", i):
            nl = text.find("\n", i)
            if nl == -1:
                break
            i = nl
            continue
        elif ch in _OPEN:
            depth += 1
        elif ch in _CLOSE:
            depth = max(depth - 1, 0)

        i += 1

    return depth

def needs_continuation(text: str) -> bool:
    return bracket_depth(text) > 0 or text.rstrip().endswith("\\")

class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )

def _parse_switch(arg: str, current: bool) -> Optional[bool]:
    lowered = arg.lower()

    if lowered in ("on", "1", "true", "yes"):
        return True
    if lowered in ("off", "0", "false", "no"):
        return False
    if lowered == "":
        return not current

    return None

def handle_slash(line: str, realm_box: list[Realm]) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        state = _parse_switch(arg, debug_py_trace_enabled())
        if state is None:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        if state:
            os.environ["THISBIND_DEBUG_PY_TRACE"] = "1"
        else:
            os.environ.pop("THISBIND_DEBUG_PY_TRACE", None)

        print(f"Python traceback: {'on' if state else 'off'}")
        return True

    if cmd == "/strict":
        realm = realm_box[0]
        state = _parse_switch(arg, realm.mode is ResolverMode.STRICT)
        if state is None:
            print("Usage: /strict [on|off]", file=sys.stderr)
            return True

        realm.set_mode(ResolverMode.STRICT if state else ResolverMode.SLOPPY)
        print(f"Strict mode: {'on' if state else 'off'}")
        return True

    if cmd == "/reset":
        old = realm_box[0]
        mode = old.mode
        old.close()
        realm_box[0] = Realm(mode=mode, echo=True)
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True

def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)

def repl(mode: Optional[ResolverMode] = None) -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    # Use a mutable box so /reset can swap the realm.
    realm_box: list[Realm] = [Realm(mode=mode, echo=True)]

    bindings = KeyBindings()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        if text.startswith("/") or not needs_continuation(text):
            buf.validate_and_handle()
            return

        indent = "    " * bracket_depth(text)
        buf.insert_text("\n" + indent)

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("thisbind repl (Ctrl-D to exit, / for commands)")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if handle_slash(text, realm_box):
            continue

        try:
            result, stmt = repl_eval(text, realm_box[0])
        except (ParseError, ThisbindError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            if debug_py_trace_enabled():
                print("\nPython traceback:", file=sys.stderr)
                print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")
            continue

        if not stmt and result is not UNDEFINED:
            print(inspect(result))

    realm_box[0].close()
