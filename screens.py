from __future__ import annotations
import logging
from typing import Callable

from domain import UserContext
from results import Result
from search import filter_rows

logger = logging.getLogger("screens")

INFO, SUCCESS, ERROR = "info", "success", "error"


class RecordScreen:
    """
    State behind one list screen (patients, doctors or appointments), kept
    free of Qt so the widgets only render it.

    Rows are always the full owner-scoped set; ``visible`` is that set passed
    through the search box. Writes are followed by a full reload, never a local
    patch of ``rows``.
    """

    def __init__(self, repo, ctx: UserContext | None, *, noun: str, fields,
                 validate: Callable[[object], list[str]],
                 notify: Callable[[str, str], None] | None = None,
                 created_msg: str | None = None):
        self.repo = repo
        self.ctx = ctx
        self.noun = noun                # "patient", "doctor", "appointment"
        self.fields = tuple(fields)
        self.validate = validate
        self.notify = notify or (lambda level, msg: None)
        self.created_msg = created_msg or f"{noun.capitalize()} added successfully"
        self.rows: list = []
        self.visible: list = []
        self.query = ""
        self.busy = False

    @property
    def is_empty(self) -> bool:
        return not self.visible

    @property
    def placeholder(self) -> str:
        return f"No {self.noun}s found. Add your first {self.noun} to get started."

    # ----- list / filter -----
    def refresh(self) -> bool:
        if self.ctx is None:
            # no session, nothing to fetch
            return False
        res = self.repo.list(self.ctx)
        if not res.ok:
            # stale rows stay on screen until the next successful refresh
            self.notify(ERROR, f"Failed to fetch {self.noun}s")
            return False
        self.rows = res.value
        self._apply_filter()
        return True

    def set_query(self, q: str):
        self.query = q or ""
        self._apply_filter()

    def _apply_filter(self):
        self.visible = filter_rows(self.rows, self.query, self.fields)

    # ----- create / update -----
    def save(self, dto) -> bool:
        """
        Create when dto.id is None, otherwise update that id. Returns True on
        success; on False the caller keeps the form open with its contents.
        """
        if self.busy:
            return False
        errors = self.validate(dto)
        if errors:
            self.notify(ERROR, " ".join(errors))
            return False
        if self.ctx is None:
            self.notify(ERROR, "You must be signed in.")
            return False

        self.busy = True
        try:
            if dto.id is None:
                res: Result = self.repo.create(self.ctx, dto)
                ok_msg = self.created_msg
            else:
                res = self.repo.update(self.ctx, dto.id, dto)
                ok_msg = f"{self.noun.capitalize()} updated successfully"
        finally:
            self.busy = False

        if not res.ok:
            self.notify(ERROR, res.message_or(f"Failed to save {self.noun}"))
            return False
        self.notify(SUCCESS, ok_msg)
        self.refresh()
        return True

    # ----- delete -----
    def delete(self, rid: int, confirm: Callable[[str], bool]) -> bool:
        if not confirm(f"Are you sure you want to delete this {self.noun}?"):
            return False
        if self.ctx is None:
            self.notify(ERROR, "You must be signed in.")
            return False
        res = self.repo.delete(self.ctx, rid)
        if not res.ok:
            logger.warning("delete %s #%s: %s", self.noun, rid, res.error.message)
            self.notify(ERROR, f"Failed to delete {self.noun}")
            return False
        self.notify(SUCCESS, f"{self.noun.capitalize()} deleted successfully")
        self.refresh()
        return True
