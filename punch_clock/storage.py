from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from .config import settings
from .errors import AlreadyInitialized, Uninitialized
from .record import Record

logger = logging.getLogger(__name__)


class Ledger:
    """The on-disk ledger: a whole-file read, modify, rewrite cycle.

    There is no locking; two processes writing the same ledger race each other.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._record: Optional[Record] = None

    @property
    def exists(self) -> bool:
        return self.path.exists()

    @property
    def record(self) -> Record:
        if self._record is None:
            self._record = self.load()
        return self._record

    def load(self) -> Record:
        if not self.exists:
            raise Uninitialized()
        text = self.path.read_text(encoding="utf-8")
        record = Record.parse(text)
        logger.debug("Loaded %d entries from %s", len(record.entries), self.path)
        return record

    def init(self) -> Record:
        if self.exists:
            raise AlreadyInitialized()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._record = Record()
        self.commit()
        logger.info("Initialized ledger at %s", self.path)
        return self._record

    def commit(self) -> None:
        if self._record is None:
            return
        text = self._record.serialize()
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, self.path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d bytes to %s", len(text), self.path)

    def discard(self) -> None:
        self._record = None


def get_ledger() -> Generator[Ledger, None, None]:
    ledger = Ledger(settings.ledger_path)
    try:
        yield ledger
    finally:
        ledger.discard()


@contextmanager
def ledger_session(path: Optional[Path] = None) -> Generator[Ledger, None, None]:
    ledger = Ledger(path or settings.ledger_path)
    try:
        yield ledger
        ledger.commit()
    finally:
        ledger.discard()
