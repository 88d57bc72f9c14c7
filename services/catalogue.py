"""
Catalogue Service

Create/read/update/delete and bulk operations on books, plus the three
criteria-based queries (search, advanced search, filter) built on the
query builder.
"""
import logging
from typing import Any, List, Optional

from pydantic import ValidationError
from sqlalchemy import delete, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import Conflict, InvalidInput, NotFound
from app.query_builder import QueryBuilder
from models.models import Book
from schemas.schemas import BookCreate, BookUpdate

logger = logging.getLogger(__name__)

DEFAULT_ATTRIBUTION = "Admin"
REQUIRED_BULK_FIELDS = ("isbn", "title", "price")


def _dialect(db: Session) -> str:
    return db.get_bind().dialect.name


def _commit_or_conflict(db: Session, message: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("%s: %s", message, exc.orig)
        raise Conflict(message)


def _new_book(book_data: BookCreate) -> Book:
    return Book(
        isbn = book_data.isbn,
        title = book_data.title,
        author = book_data.author,
        genre = book_data.genre,
        price = book_data.price,
        image_url = book_data.image_url,
        description = book_data.description,
        username = book_data.username or DEFAULT_ATTRIBUTION,
    )


def list_books(db: Session) -> List[Book]:
    return db.query(Book).order_by(Book.id).all()


def get_book(db: Session, book_id: int) -> Book:
    book = db.query(Book).filter(Book.id == book_id).first()
    if book is None:
        raise NotFound(f"Book {book_id} not found")
    return book


def create_book(db: Session, book_data: BookCreate) -> Book:
    book = _new_book(book_data)
    db.add(book)
    _commit_or_conflict(db, "A book with this ISBN already exists")
    db.refresh(book)
    logger.info("Created book %d (%s)", book.id, book.isbn)
    return book


def validate_bulk(payload: Any) -> List[BookCreate]:
    """Check the whole batch before anything is written."""
    if not isinstance(payload, list):
        raise InvalidInput("Invalid input: Expected an array of books")

    books = []
    for index, element in enumerate(payload):
        if not isinstance(element, dict):
            raise InvalidInput(f"Invalid input: element {index} is not a book object")
        missing = [field for field in REQUIRED_BULK_FIELDS if element.get(field) in (None, "")]
        if missing:
            raise InvalidInput("Each book must have an ISBN, title, and price")
        try:
            books.append(BookCreate.model_validate(element))
        except ValidationError as exc:
            raise InvalidInput(f"Invalid book at index {index}: {exc.errors()[0]['msg']}")
    return books


def create_books(db: Session, payload: Any) -> List[Book]:
    """Insert every book of the batch in one transaction, or none of them."""
    books = [_new_book(book_data) for book_data in validate_bulk(payload)]
    db.add_all(books)
    _commit_or_conflict(db, "Bulk insert rejected: a book violates a catalogue constraint")
    logger.info("Bulk inserted %d books", len(books))
    return books


def update_book(db: Session, book_id: int, book_data: BookUpdate) -> Book:
    book = get_book(db, book_id)
    book.title = book_data.title
    book.author = book_data.author
    book.genre = book_data.genre
    book.price = book_data.price
    book.image_url = book_data.image_url
    book.description = book_data.description
    db.commit()
    db.refresh(book)
    return book


def delete_book(db: Session, book_id: int) -> int:
    deleted = db.execute(delete(Book).where(Book.id == book_id)).rowcount
    db.commit()
    logger.info("Deleted book %d (%d row)", book_id, deleted)
    return deleted


def delete_books(db: Session, ids: List[int]) -> int:
    deleted = db.execute(delete(Book).where(Book.id.in_(ids))).rowcount
    db.commit()
    logger.info("Deleted %d of %d requested books", deleted, len(ids))
    return deleted


def delete_all_books(db: Session) -> int:
    """Empty the catalogue and restart book ids at 1."""
    deleted = db.execute(delete(Book)).rowcount
    dialect = _dialect(db)
    if dialect == "postgresql":
        db.execute(text("ALTER SEQUENCE books_id_seq RESTART WITH 1"))
    elif dialect == "sqlite":
        db.execute(text("DELETE FROM sqlite_sequence WHERE name = :name"), {"name": Book.__tablename__})
    else:
        logger.warning("No id sequence reset for dialect %s", dialect)
    db.commit()
    logger.info("Deleted all %d books and reset the id sequence", deleted)
    return deleted


# ------------------- CRITERIA QUERIES -------------------

def _run(db: Session, builder: QueryBuilder) -> List[Book]:
    return db.execute(builder.statement()).scalars().all()


def search_books(db: Session, query: Optional[str] = None, genre: Optional[str] = None,
                 author: Optional[str] = None, min_price: Optional[str] = None,
                 max_price: Optional[str] = None) -> List[Book]:
    builder = (
        QueryBuilder(Book, _dialect(db))
        .contains_any([Book.title, Book.author, Book.genre], query)
        .equals(Book.genre, genre)
        .contains(Book.author, author)
        .between(Book.price, min_price, max_price)
    )
    return _run(db, builder)


def advanced_search_books(db: Session, title: Optional[str] = None, author: Optional[str] = None,
                          genre: Optional[str] = None, min_price: Optional[str] = None,
                          max_price: Optional[str] = None) -> List[Book]:
    builder = (
        QueryBuilder(Book, _dialect(db))
        .contains(Book.title, title)
        .contains(Book.author, author)
        .contains(Book.genre, genre)
        .between(Book.price, min_price, max_price)
    )
    return _run(db, builder)


def filter_books(db: Session, genre: Optional[str] = None, author: Optional[str] = None,
                 min_price: Optional[str] = None, max_price: Optional[str] = None) -> List[Book]:
    builder = (
        QueryBuilder(Book, _dialect(db))
        .equals(Book.genre, genre)
        .equals(Book.author, author)
        .between(Book.price, min_price, max_price)
    )
    return _run(db, builder)
