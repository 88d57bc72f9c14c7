import logging
from typing import List, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.database import INTEGER_MAX, INTEGER_MIN
from app.errors import NotFound
from app.query_builder import PaginationWindow
from models.models import Book, Review, User

logger = logging.getLogger(__name__)


def _as_dict(review: Review, user: User) -> dict:
    return {
        "review_id": review.id,
        "book_id": review.book_id,
        "content": review.content,
        "created_at": review.created_at,
        "likes": review.likes,
        "username": user.username,
        "profile_pic_url": user.profile_pic_url,
    }


def get_reviews_page(db: Session, book_id: int, window: PaginationWindow) -> Tuple[List[dict], int]:
    """One page of a book's reviews, newest first, and the book's total review count."""
    stmt = (
        select(Review, User)
        .join(User, Review.user_id == User.id)
        .where(Review.book_id == book_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    rows = db.execute(window.apply(stmt)).all()
    total = db.execute(
        select(func.count()).select_from(Review).where(Review.book_id == book_id)
    ).scalar_one()
    return [_as_dict(review, user) for review, user in rows], total


def create_review(db: Session, book_id: int, user_id: int, content: str) -> dict:
    if db.get(Book, book_id) is None:
        raise NotFound(f"Book {book_id} not found")
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")

    review = Review(book_id = book_id, user_id = user_id, content = content)
    db.add(review)
    db.commit()
    db.refresh(review)
    logger.info("User %d reviewed book %d", user_id, book_id)
    return _as_dict(review, user)


def like_review(db: Session, review_id: int) -> int:
    """Add one like in a single UPDATE; returns the number of rows touched (0 for an unknown id)."""
    if not INTEGER_MIN <= review_id <= INTEGER_MAX:
        logger.info("Like for out-of-range review id ignored")
        return 0
    updated = db.execute(
        update(Review)
        .where(Review.id == review_id)
        .values(likes = Review.likes + 1)
        .execution_options(synchronize_session = False)
    ).rowcount
    db.commit()
    if not updated:
        logger.info("Like for unknown review %d ignored", review_id)
    return updated
