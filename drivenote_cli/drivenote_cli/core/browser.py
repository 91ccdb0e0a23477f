"""Folder browser state machine.

Navigation is modelled as a pure function ``reduce(state, action)`` that
returns the next :class:`BrowserState` together with an optional effect
describing the I/O to perform (fetch a listing, import a file).
:class:`FolderBrowser` runs those effects against a :class:`GraphClient`
and feeds the results back in as actions.  The terminal UI in
:mod:`.interactive` only renders the state and dispatches actions.

Listings are never cached: every navigation fetches the folder again.
"""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple, Union

from .errors import DriveError
from .graph import GraphClient, RemoteEntry
from .notes import NoteVault

logger = logging.getLogger(__name__)

ROOT = "/"


class Status(Enum):
    LOADING = "loading"
    DISPLAYING = "displaying"
    ERROR = "error"


@dataclass(frozen=True)
class BrowserState:
    status: Status = Status.LOADING
    path: str = ROOT
    breadcrumbs: Tuple[str, ...] = (ROOT,)
    entries: Tuple[RemoteEntry, ...] = ()
    error: Optional[str] = None


# ── actions ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class Open:
    pass


@dataclass(frozen=True)
class Refresh:
    pass


@dataclass(frozen=True)
class SelectFolder:
    name: str


@dataclass(frozen=True)
class SelectParent:
    pass


@dataclass(frozen=True)
class SelectBreadcrumb:
    index: int


@dataclass(frozen=True)
class SelectFile:
    entry: RemoteEntry


@dataclass(frozen=True)
class ListingLoaded:
    path: str
    entries: Tuple[RemoteEntry, ...]


@dataclass(frozen=True)
class ListingFailed:
    path: str
    message: str


Action = Union[
    Open, Refresh, SelectFolder, SelectParent, SelectBreadcrumb, SelectFile,
    ListingLoaded, ListingFailed,
]


# ── effects ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class FetchListing:
    path: str


@dataclass(frozen=True)
class ImportFile:
    entry: RemoteEntry


Effect = Union[FetchListing, ImportFile]


def path_from_breadcrumbs(breadcrumbs: Tuple[str, ...]) -> str:
    segments = breadcrumbs[1:]
    return ROOT + "/".join(segments) if segments else ROOT


def _navigate(breadcrumbs: Tuple[str, ...]) -> Tuple[BrowserState, Effect]:
    path = path_from_breadcrumbs(breadcrumbs)
    return BrowserState(status=Status.LOADING, path=path, breadcrumbs=breadcrumbs), FetchListing(path)


def reduce(state: BrowserState, action: Action) -> Tuple[BrowserState, Optional[Effect]]:
    """Return the state following ``action`` and the effect to run, if any."""

    if isinstance(action, (Open, Refresh)):
        return _navigate(state.breadcrumbs)
    if isinstance(action, SelectFolder):
        return _navigate(state.breadcrumbs + (action.name,))
    if isinstance(action, SelectParent):
        if len(state.breadcrumbs) <= 1:
            return state, None
        return _navigate(state.breadcrumbs[:-1])
    if isinstance(action, SelectBreadcrumb):
        if not 0 <= action.index < len(state.breadcrumbs):
            return state, None
        return _navigate(state.breadcrumbs[: action.index + 1])
    if isinstance(action, SelectFile):
        return state, ImportFile(action.entry)
    if isinstance(action, ListingLoaded):
        if action.path != state.path:
            # answer for a folder the user already left
            return state, None
        return replace(
            state,
            status=Status.DISPLAYING,
            entries=tuple(sort_entries(action.entries)),
            error=None,
        ), None
    if isinstance(action, ListingFailed):
        if action.path != state.path:
            return state, None
        return replace(state, status=Status.ERROR, entries=(), error=action.message), None
    raise TypeError(f"Unknown browser action: {action!r}")


def sort_entries(entries: Iterable[RemoteEntry]) -> List[RemoteEntry]:
    """Folders first, then files; names compared ignoring case and accents.

    Names differing only in accents or case fall back to the exact form,
    lower case first, the way locale collation orders them.
    """
    return sorted(
        entries,
        key=lambda e: (not e.is_folder, _collation_base(e.name), e.name.casefold(), e.name.swapcase()),
    )


def _collation_base(name: str) -> str:
    decomposed = unicodedata.normalize("NFKD", name)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def format_size(size: float) -> str:
    units = ["B", "KB", "MB", "GB"]
    unit = 0
    while size >= 1024 and unit < len(units) - 1:
        size /= 1024
        unit += 1
    return f"{size:.1f} {units[unit]}"


Notify = Callable[[str, bool], None]


def _log_notify(message: str, ok: bool) -> None:
    logger.log(logging.INFO if ok else logging.ERROR, message)


class FolderBrowser:
    """Drives :func:`reduce` and performs the effects it asks for."""

    def __init__(self, client: GraphClient, vault: NoteVault, notify: Notify | None = None):
        self.client = client
        self.vault = vault
        self.state = BrowserState()
        self._notify = notify or _log_notify

    def dispatch(self, action: Action) -> BrowserState:
        self.state, effect = reduce(self.state, action)
        while effect is not None:
            follow_up = self._run(effect)
            if follow_up is None:
                break
            self.state, effect = reduce(self.state, follow_up)
        return self.state

    def open(self) -> BrowserState:
        return self.dispatch(Open())

    def refresh(self) -> BrowserState:
        return self.dispatch(Refresh())

    def select_folder(self, name: str) -> BrowserState:
        return self.dispatch(SelectFolder(name))

    def select_parent(self) -> BrowserState:
        return self.dispatch(SelectParent())

    def select_breadcrumb(self, index: int) -> BrowserState:
        return self.dispatch(SelectBreadcrumb(index))

    def select_file(self, entry: RemoteEntry) -> BrowserState:
        return self.dispatch(SelectFile(entry))

    def _run(self, effect: Effect) -> Optional[Action]:
        if isinstance(effect, FetchListing):
            try:
                entries = self.client.list_children(effect.path)
            except DriveError as e:
                logger.error("Failed to load %s: %s", effect.path, e)
                return ListingFailed(effect.path, str(e))
            return ListingLoaded(effect.path, tuple(entries))
        if isinstance(effect, ImportFile):
            self._import(effect.entry)
            return None
        raise TypeError(f"Unknown browser effect: {effect!r}")

    def _import(self, entry: RemoteEntry) -> None:
        try:
            content = self.client.download(entry.id)
            note = self.vault.create_note(entry.name, content)
        except FileExistsError as e:
            logger.error("Note already exists: %s", e.filename)
            self._notify(f'Failed to import file "{entry.name}": note already exists', False)
        except (DriveError, OSError) as e:
            logger.error("Error importing %s: %s", entry.name, e)
            self._notify(f'Failed to import file "{entry.name}"', False)
        else:
            logger.debug("Imported %s into %s", entry.name, note)
            self._notify(f'File "{entry.name}" imported successfully', True)
