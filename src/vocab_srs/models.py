"""Data classes for the vocabulary scheduling domain."""
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Optional

from vocab_srs.errors import InvalidRating

SUCCESS_THRESHOLD = 3
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO timestamp; naive values are taken as UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class LearningStatus(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    MATURE = "mature"


class Rating(IntEnum):
    """Self-assessed recall, mapped from the 0-5 answer scale.

    Scores 0-2 all collapse to AGAIN: a failed recall is scheduled the
    same way whatever its score.
    """

    AGAIN = 0
    HARD = 3
    GOOD = 4
    EASY = 5

    @classmethod
    def from_score(cls, value) -> "Rating":
        if isinstance(value, Rating):
            return value
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidRating(value)
        if not 0 <= value <= 5:
            raise InvalidRating(value)
        if value < SUCCESS_THRESHOLD:
            return cls.AGAIN
        return cls(value)

    @property
    def is_success(self) -> bool:
        return self >= SUCCESS_THRESHOLD

    @property
    def bucket(self) -> str:
        """Name of the session counter this rating lands in."""
        return self.name.lower()


@dataclass
class VocabularyCard:
    id: str
    text: str
    next_review_date: datetime
    definition: str = ""
    item_type: str = "word"
    example: Optional[str] = None
    learning_status: LearningStatus = LearningStatus.NEW
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval_days: int = 1
    repetitions: int = 0
    last_practiced_at: Optional[datetime] = None
    times_practiced: int = 0
    times_correct: int = 0
    times_incorrect: int = 0

    @classmethod
    def from_row(cls, row) -> "VocabularyCard":
        return cls(
            id=row["id"],
            text=row["text"],
            definition=row["definition"] or "",
            item_type=row["item_type"],
            example=row["example"],
            learning_status=LearningStatus(row["learning_status"]),
            ease_factor=row["ease_factor"],
            interval_days=row["interval_days"],
            repetitions=row["repetitions"],
            next_review_date=parse_timestamp(row["next_review_date"]),
            last_practiced_at=parse_timestamp(row["last_practiced_at"]),
            times_practiced=row["times_practiced"],
            times_correct=row["times_correct"],
            times_incorrect=row["times_incorrect"],
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["learning_status"] = self.learning_status.value
        data["next_review_date"] = to_iso(self.next_review_date)
        data["last_practiced_at"] = to_iso(self.last_practiced_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "VocabularyCard":
        values = dict(data)
        values["learning_status"] = LearningStatus(values.get("learning_status", "new"))
        values["next_review_date"] = parse_timestamp(values["next_review_date"])
        values["last_practiced_at"] = parse_timestamp(values.get("last_practiced_at"))
        return cls(**values)


@dataclass
class SessionStats:
    reviewed: int = 0
    correct: int = 0
    again: int = 0
    hard: int = 0
    good: int = 0
    easy: int = 0

    def record(self, rating: Rating) -> None:
        self.reviewed += 1
        if rating.is_success:
            self.correct += 1
        setattr(self, rating.bucket, getattr(self, rating.bucket) + 1)


@dataclass
class ReviewSession:
    session_id: str
    cards: list[VocabularyCard]
    current_index: int = 0
    session_stats: SessionStats = field(default_factory=SessionStats)
    started_at: Optional[datetime] = None

    @property
    def is_complete(self) -> bool:
        return self.current_index >= len(self.cards)

    @property
    def current_card(self) -> Optional[VocabularyCard]:
        if self.is_complete:
            return None
        return self.cards[self.current_index]

    def find_card(self, card_id: str) -> Optional[VocabularyCard]:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "cards": [card.to_dict() for card in self.cards],
            "current_index": self.current_index,
            "session_stats": asdict(self.session_stats),
            "started_at": to_iso(self.started_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ReviewSession":
        return cls(
            session_id=data["session_id"],
            cards=[VocabularyCard.from_dict(c) for c in data.get("cards", [])],
            current_index=data.get("current_index", 0),
            session_stats=SessionStats(**data.get("session_stats", {})),
            started_at=parse_timestamp(data.get("started_at")),
        )


@dataclass(frozen=True)
class SRSStats:
    total_cards: int = 0
    due_today: int = 0
    new_cards: int = 0
    learning_cards: int = 0
    review_cards: int = 0
    mature_cards: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    total_reviews: int = 0
    accuracy_rate: int = 0
