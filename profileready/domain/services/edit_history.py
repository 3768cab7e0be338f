from __future__ import annotations

from typing import Callable

from profileready.domain.entities.edit_history import EditHistoryEntry

ApplyCallback = Callable[[EditHistoryEntry], None]


class EditHistory:
    """Undo/redo over editing snapshots using two stacks.

    ``past`` always holds at least the initial entry and its top is the active
    state. Recording a new entry drops the redo stack, so there is no
    branching history. ``on_apply`` is called synchronously whenever undo or
    redo changes the active state; ``record`` never calls it, which keeps the
    controls from feeding their own restore back into the history.
    """

    def __init__(self, initial: EditHistoryEntry | None = None, on_apply: ApplyCallback | None = None) -> None:
        self._past: list[EditHistoryEntry] = [initial or EditHistoryEntry()]
        self._future: list[EditHistoryEntry] = []
        self._on_apply = on_apply

    @property
    def past(self) -> tuple[EditHistoryEntry, ...]:
        return tuple(self._past)

    @property
    def future(self) -> tuple[EditHistoryEntry, ...]:
        return tuple(self._future)

    @property
    def can_undo(self) -> bool:
        return len(self._past) > 1

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    def current(self) -> EditHistoryEntry:
        return self._past[-1]

    def record(self, entry: EditHistoryEntry) -> None:
        self._past.append(entry)
        self._future.clear()

    def undo(self) -> EditHistoryEntry:
        if not self.can_undo:
            return self.current()
        self._future.append(self._past.pop())
        return self._activate(self.current())

    def redo(self) -> EditHistoryEntry:
        if not self.can_redo:
            return self.current()
        self._past.append(self._future.pop())
        return self._activate(self.current())

    def reset(self, initial: EditHistoryEntry) -> None:
        """Start over from ``initial``, e.g. after a new photo is loaded."""
        self._past = [initial]
        self._future.clear()
        self._activate(initial)

    def _activate(self, entry: EditHistoryEntry) -> EditHistoryEntry:
        if self._on_apply is not None:
            self._on_apply(entry)
        return entry
