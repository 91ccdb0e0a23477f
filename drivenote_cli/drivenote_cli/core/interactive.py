"""Interactive folder browser using InquirerPy.

The prompt loop below is only a rendering adapter: it turns the current
:class:`BrowserState` into a list of choices and maps the user's pick back
to a browser action.  All navigation rules live in :mod:`.browser`.
"""

from __future__ import annotations

import sys
from typing import List, Union

from InquirerPy import inquirer
from InquirerPy.prompts.list import ListPrompt
from InquirerPy.separator import Separator

from .browser import BrowserState, FolderBrowser, Status, format_size
from .graph import RemoteEntry


def _execute(prompt):
    """Execute a prompt and handle ``Ctrl-C`` gracefully."""
    try:
        return prompt.execute()
    except KeyboardInterrupt:
        print("\nCancelled by user", file=sys.stderr)
        sys.exit(1)


def entry_label(entry: RemoteEntry) -> str:
    if entry.is_folder:
        count = f"  ({entry.child_count})" if entry.child_count is not None else ""
        return f"{entry.name}/{count}"
    meta = []
    if entry.size:
        meta.append(format_size(entry.size))
    if entry.modified_at:
        meta.append(entry.modified_at.date().isoformat())
    return f"{entry.name}  {'  '.join(meta)}".rstrip()


def breadcrumb_label(state: BrowserState) -> str:
    crumbs = ["Root" if c == "/" else c for c in state.breadcrumbs]
    return " > ".join(crumbs)


def build_choices(state: BrowserState) -> List[Union[dict, Separator]]:
    choices: List[Union[dict, Separator]] = []
    if state.path != "/":
        choices.append({"name": "..", "value": "__up"})
    if state.status is Status.ERROR:
        choices.append(Separator(f"Failed to load OneDrive files: {state.error}"))
    elif state.status is Status.LOADING:
        choices.append(Separator("Loading..."))
    elif not state.entries:
        choices.append(Separator("(empty folder)"))
    for entry in state.entries:
        choices.append({"name": entry_label(entry), "value": ("entry", entry)})
    choices.append({"name": "<Close>", "value": "__close"})
    return choices


def _pick_breadcrumb(state: BrowserState):
    choices = [
        {"name": "Root" if c == "/" else " > ".join(state.breadcrumbs[1: i + 1]), "value": i}
        for i, c in enumerate(state.breadcrumbs)
    ]
    return _execute(
        inquirer.select(
            message="Jump to:",
            choices=choices,
            default=len(choices) - 1,
            instruction="↑/↓, Enter",
        )
    )


def interactive_browse(browser: FolderBrowser) -> None:
    """Browse OneDrive folders until the user closes the browser.

    Selecting a folder opens it, selecting a file imports it as a note.
    """

    print("Loading OneDrive files...", file=sys.stderr)
    browser.open()
    while True:
        state = browser.state
        prompt = ListPrompt(
            message=breadcrumb_label(state),
            choices=build_choices(state),
            instruction="↑/↓, PgUp/PgDn, Ctrl+R refresh, Ctrl+B breadcrumbs, Enter",
            height="90%",
            keybindings={
                "pageup": [{"key": "pageup"}],
                "pagedown": [{"key": "pagedown"}],
                "refresh": [{"key": "c-r"}],
                "crumbs": [{"key": "c-b"}],
            },
        )

        def _page(step: int) -> None:
            cc = prompt.content_control
            cc.selected_choice_index = max(
                0, min(cc.choice_count - 1, cc.selected_choice_index + step)
            )

        def _page_up(event) -> None:
            _page(-10)

        def _page_down(event) -> None:
            _page(10)

        def _refresh(event) -> None:
            event.app.exit(result="__refresh__")

        def _crumbs(event) -> None:
            event.app.exit(result="__crumbs__")

        prompt.kb_func_lookup.update(
            {
                "pageup": [{"func": _page_up}],
                "pagedown": [{"func": _page_down}],
                "refresh": [{"func": _refresh}],
                "crumbs": [{"func": _crumbs}],
            }
        )

        choice = _execute(prompt)
        if choice == "__close" or choice is None:
            return
        if choice == "__refresh__":
            browser.refresh()
        elif choice == "__up":
            browser.select_parent()
        elif choice == "__crumbs__":
            browser.select_breadcrumb(_pick_breadcrumb(state))
        else:
            _, entry = choice
            if entry.is_folder:
                browser.select_folder(entry.name)
            else:
                browser.select_file(entry)
