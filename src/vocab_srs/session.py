"""Review session lifecycle: start, resume, rate cards, complete."""
import logging
import random
from datetime import datetime
from typing import Callable, Optional

from vocab_srs.errors import ItemNotFound
from vocab_srs.items import apply_review, get_item
from vocab_srs.models import Rating, ReviewSession, SRSStats, utcnow
from vocab_srs.selector import build_session_pool
from vocab_srs.session_store import SessionStore
from vocab_srs.sm2 import apply_rating
from vocab_srs.stats import get_stats

logger = logging.getLogger(__name__)

DEFAULT_MAX_CARDS = 20


class ReviewSessionManager:
    """Drives review sessions for one deck.

    Card state is written after every rating, so an abandoned session
    loses at most the review in flight. Two devices rating the same card
    at once resolve as last write wins in the item store.
    """

    def __init__(
        self,
        db_path: str,
        session_store: SessionStore,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db_path = db_path
        self.session_store = session_store
        self.rng = rng or random.Random()
        self.clock = clock

    def start(self, session_id: str, max_cards: int = DEFAULT_MAX_CARDS) -> ReviewSession:
        now = self.clock()
        cards = build_session_pool(self.db_path, max_cards, rng=self.rng, today=now.date())
        logger.info("Started session %r with %d cards", session_id, len(cards))
        return ReviewSession(session_id=session_id, cards=cards, started_at=now)

    def resume_or_start(self, session_id: str, max_cards: int = DEFAULT_MAX_CARDS) -> ReviewSession:
        session = self.session_store.load(session_id)
        if session is not None and not session.is_complete:
            logger.info(
                "Resuming session %r at card %d/%d",
                session_id, session.current_index + 1, len(session.cards),
            )
            return session
        return self.start(session_id, max_cards)

    def process_review(self, session: ReviewSession, card_id: str, rating) -> ReviewSession:
        """Apply a rating to a card and record it in the session.

        Raises:
            InvalidRating: rating is not an integer from 0 to 5.
            ItemNotFound: the card is not in this session or no longer in the deck.
            PersistenceWriteFailure: the card or the local session copy could
                not be written. A failed card write keeps neither the new
                card state nor its log entry, and the session is not
                advanced. When only the session write fails, the session
                object has already been advanced and stays usable.
        """
        parsed = Rating.from_score(rating)
        # The review log keeps the raw 0-5 score
        score = int(rating)
        if session.find_card(card_id) is None:
            raise ItemNotFound(card_id, where=f"session {session.session_id!r}")
        card = get_item(self.db_path, card_id)
        if card is None:
            raise ItemNotFound(card_id)

        now = self.clock()
        fields = apply_rating(card, parsed, now)
        if not apply_review(self.db_path, card_id, score, fields, now):
            raise ItemNotFound(card_id)
        logger.debug(
            "Reviewed %r: rating=%s interval=%d next=%s",
            card.text, score, fields["interval_days"], fields["next_review_date"].date(),
        )

        session.session_stats.record(parsed)
        session.current_index += 1
        self.session_store.save(session.session_id, session)
        return session

    def skip_card(self, session: ReviewSession) -> ReviewSession:
        """Move past the current card without rating it.

        For cards removed from the deck after the session started.
        Session stats are left as they are.
        """
        card = session.current_card
        if card is None:
            return session
        logger.warning("Skipping %r in session %r", card.text, session.session_id)
        session.current_index += 1
        self.session_store.save(session.session_id, session)
        return session

    def complete(self, session: ReviewSession) -> None:
        self.session_store.clear(session.session_id)
        stats = session.session_stats
        logger.info(
            "Completed session %r: %d reviewed, %d correct",
            session.session_id, stats.reviewed, stats.correct,
        )

    def get_stats(self) -> SRSStats:
        return get_stats(self.db_path, self.clock())
