"""Interactive directory picker on top of questionary."""

from __future__ import annotations

import sys
from collections.abc import Sequence

import questionary
from prompt_toolkit.output import create_output

from cdh.config import PickerConfig

# questionary can only assign hotkeys to this many choices
_MAX_SHORTCUTS = 36


def _interactive() -> bool:
    return sys.stdin.isatty() and sys.stderr.isatty()


def pick(items: Sequence[str], config: PickerConfig | None = None) -> str | None:
    """Let the user choose one item. Returns None on cancel.

    Without a terminal (pipes, tests) the first item is returned as-is. The
    prompt renders on stderr so stdout carries only the selection.
    """
    if not items:
        return None
    if not _interactive():
        return items[0]

    cfg = config or PickerConfig()
    return questionary.select(
        "cd to:",
        choices=list(items),
        use_shortcuts=cfg.shortcuts and len(items) <= _MAX_SHORTCUTS,
        use_jk_keys=not cfg.shortcuts or len(items) > _MAX_SHORTCUTS,
        output=create_output(stdout=sys.stderr),
    ).ask()
