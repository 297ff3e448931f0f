"""JSON-file implementations of CardRepository and ReviewLog.

Cards and review sessions share one document::

    {"cards": [...], "sessions": [...]}

The whole document is rewritten on every change through a temporary file
that replaces the original, so a crash never leaves a half-written file.
"""

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError as SchemaValidationError

from codec.models import CardRecord, ReviewSessionRecord, StudyDocument
from domain.model.errors import StorageError
from domain.model.review import ReviewSession, SpacedRepetitionCard

logger = logging.getLogger(__name__)


class JsonStudyFile:
    """In-memory copy of the study document, written back on flush()."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.cards: dict[str, SpacedRepetitionCard] = {}
        self.sessions: list[ReviewSession] = []
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            document = StudyDocument.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, SchemaValidationError) as e:
            logger.error("Failed to read study file", extra={"path": str(self.path), "error": str(e)})
            raise StorageError(f"Cannot read study file {self.path}: {e}") from e
        self.cards = {record.id: record.to_domain() for record in document.cards}
        self.sessions = [record.to_domain() for record in document.sessions]

    def flush(self) -> bool:
        document = StudyDocument(
            cards=[CardRecord.from_domain(c) for c in self.cards.values()],
            sessions=[ReviewSessionRecord.from_domain(s) for s in self.sessions],
        )
        payload = document.model_dump_json(by_alias=True, indent=2)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
            return True
        except OSError as e:
            logger.error("Failed to write study file", extra={"path": str(self.path), "error": str(e)})
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            return False


class JsonFileCardRepository:
    def __init__(self, study_file: JsonStudyFile):
        self.study_file = study_file

    def save(self, card: SpacedRepetitionCard) -> bool:
        cards = self.study_file.cards
        previous = cards.get(card.id)
        cards[card.id] = card
        if self.study_file.flush():
            return True
        # roll back so memory matches disk
        if previous is None:
            del cards[card.id]
        else:
            cards[card.id] = previous
        return False

    def get_by_id(self, card_id: str) -> SpacedRepetitionCard | None:
        return self.study_file.cards.get(card_id)

    def list_all(self) -> list[SpacedRepetitionCard]:
        return list(self.study_file.cards.values())

    def delete(self, card_id: str) -> bool:
        card = self.study_file.cards.pop(card_id, None)
        if card is None:
            return False
        if not self.study_file.flush():
            self.study_file.cards[card_id] = card
            return False
        return True


class JsonFileReviewLog:
    def __init__(self, study_file: JsonStudyFile):
        self.study_file = study_file

    def append(self, session: ReviewSession) -> bool:
        self.study_file.sessions.append(session)
        if self.study_file.flush():
            return True
        self.study_file.sessions.pop()
        return False

    def list_all(self) -> list[ReviewSession]:
        return sorted(self.study_file.sessions, key=lambda s: s.timestamp)


def open_study_file(path: Path) -> tuple[JsonFileCardRepository, JsonFileReviewLog]:
    """Open (or lazily create) a study file and return its two repositories."""
    study_file = JsonStudyFile(path)
    return JsonFileCardRepository(study_file), JsonFileReviewLog(study_file)
