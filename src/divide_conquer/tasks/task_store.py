# src/divide_conquer/tasks/task_store.py

from __future__ import annotations

import contextlib
import copy
import json
import logging
import os
from collections.abc import Callable
from pathlib import Path

from ..core.errors import InternalError
from .task_models import LoadResult, LoadStatus, TaskDocument, default_document, utc_now_iso

logger = logging.getLogger(__name__)

Clock = Callable[[], str]


class JsonFileTaskStore:
    """
    JSON file task store.

    The whole document lives in one pretty-printed UTF-8 file:
    - read never fails: missing, corrupt or unreadable files yield the default document
    - save writes a sibling .tmp file and os.replace()s it over the target

    There is no cache: every read goes to disk, so edits made by another
    process (or by hand) are picked up on the next call.
    """

    def __init__(self, path: str | Path, *, clock: Clock = utc_now_iso) -> None:
        self._path = Path(path)
        self._clock = clock
        logger.info("JsonFileTaskStore ready path=%s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> LoadResult:
        now = self._clock()

        try:
            raw = self._path.read_text("utf-8")
        except FileNotFoundError:
            logger.debug("No task file at %s; using default document.", self._path)
            return LoadResult(LoadStatus.NOT_FOUND, default_document(now))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read task file %s: %s", self._path, e)
            return LoadResult(LoadStatus.UNREADABLE, default_document(now), str(e))

        try:
            doc = TaskDocument.from_dict(json.loads(raw), now=now)
        except ValueError as e:
            # json.JSONDecodeError is a ValueError too.
            logger.warning("Task file %s is corrupt, using default document: %s", self._path, e)
            return LoadResult(LoadStatus.CORRUPT, default_document(now), str(e))

        return LoadResult(LoadStatus.FOUND, doc)

    def load(self) -> TaskDocument:
        return self.read().document

    def save(self, doc: TaskDocument) -> None:
        doc.metadata.updated_at = self._clock()
        doc.refresh_progress()

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.exception("Failed to create task directory %s", self._path.parent)
            raise InternalError(f"Failed to create config directory: {e}") from e

        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            tmp.write_text(json.dumps(doc.to_dict(), ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, self._path)
        except (OSError, TypeError) as e:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            logger.exception("Failed to write task file %s", self._path)
            raise InternalError(f"Failed to write task data: {e}") from e

        logger.debug(
            "Task document saved path=%s items=%d done=%d",
            self._path,
            doc.metadata.progress.total,
            doc.metadata.progress.completed,
        )


class InMemoryTaskStore:
    """
    In-memory store with the same contract as JsonFileTaskStore.

    Documents are deep-copied in and out so callers never share state with
    the store by reference. `status` lets tests simulate what a file store
    would report when nothing usable is stored.
    """

    def __init__(
        self,
        doc: TaskDocument | None = None,
        *,
        status: LoadStatus | None = None,
        clock: Clock = utc_now_iso,
    ) -> None:
        self._doc = copy.deepcopy(doc)
        self._status = status
        self._clock = clock
        self.save_count = 0

    def read(self) -> LoadResult:
        if self._doc is None or self._status not in (None, LoadStatus.FOUND):
            return LoadResult(self._status or LoadStatus.NOT_FOUND, default_document(self._clock()))
        doc = copy.deepcopy(self._doc)
        doc.refresh_progress()
        return LoadResult(LoadStatus.FOUND, doc)

    def load(self) -> TaskDocument:
        return self.read().document

    def save(self, doc: TaskDocument) -> None:
        doc.metadata.updated_at = self._clock()
        doc.refresh_progress()
        self._doc = copy.deepcopy(doc)
        self._status = None
        self.save_count += 1

    @property
    def document(self) -> TaskDocument | None:
        """Snapshot of the last saved document (for assertions)."""
        return copy.deepcopy(self._doc)
