"""In-memory implementation of ReviewLog for testing."""

from domain.model.review import ReviewSession


class FakeReviewLog:
    def __init__(self):
        self.sessions: list[ReviewSession] = []

    def append(self, session: ReviewSession) -> bool:
        self.sessions.append(session)
        return True

    def list_all(self) -> list[ReviewSession]:
        return sorted(self.sessions, key=lambda s: s.timestamp)
