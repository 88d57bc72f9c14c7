from sqlalchemy.orm import Session
from datetime import datetime, timedelta
from decimal import Decimal
from app.database import SessionLocal, init_db
from app.security import get_password_hash
from models.models import User, Book, Review, ROLE_ADMIN, ROLE_USER

# Sample users
USERS = [
    {"username": "Admin1", "email": "admin1@example.com", "password": "adminpass", "role": ROLE_ADMIN},
    {"username": "alice", "email": "alice@example.com", "password": "password123", "role": ROLE_USER},
    {"username": "bob", "email": "bob@example.com", "password": "securepass", "role": ROLE_USER},
]

# Sample books
BOOKS = [
    {"isbn": "9780743273565", "title": "The Great Gatsby", "author": ["F. Scott Fitzgerald"], "genre": ["Classic", "Fiction"], "price": Decimal("10.99")},
    {"isbn": "9780451524935", "title": "1984", "author": ["George Orwell"], "genre": ["Dystopian", "Fiction"], "price": Decimal("8.50")},
    {"isbn": "9780061120084", "title": "To Kill a Mockingbird", "author": ["Harper Lee"], "genre": ["Classic"], "price": Decimal("12.00")},
    {"isbn": "9780201633610", "title": "Design Patterns", "author": ["Erich Gamma", "Richard Helm", "Ralph Johnson", "John Vlissides"], "genre": ["Software"], "price": Decimal("54.95")},
]

# Sample reviews as (user index, book index, text)
REVIEWS = [
    (1, 0, "An amazing book! A must-read."),
    (2, 1, "This book changed my perspective on society."),
    (1, 2, "I found it quite dull and overrated."),
    (2, 3, "Dense, but still the reference."),
]


def seed(db: Session):
    """Wipe the store and fill it with the sample users, books and reviews."""
    db.query(Review).delete()
    db.query(Book).delete()
    db.query(User).delete()
    db.commit()

    user_objects = [
        User(username=user["username"], email=user["email"], password_hash=get_password_hash(user["password"]), role=user["role"])
        for user in USERS
    ]
    book_objects = [Book(username="Admin", **book) for book in BOOKS]
    db.add_all(user_objects + book_objects)
    db.commit()

    for days_ago, (user_index, book_index, text) in enumerate(REVIEWS):
        db.add(Review(
            user_id=user_objects[user_index].id,
            book_id=book_objects[book_index].id,
            content=text,
            created_at=datetime.utcnow() - timedelta(days=days_ago),  # Simulating past reviews
        ))
    db.commit()
    return {"users": user_objects, "books": book_objects}


if __name__ == "__main__":
    init_db()
    db = SessionLocal()
    try:
        seed(db)
        print("Database seeding completed successfully!")
    finally:
        db.close()
