from app.security import verify_password
from models.models import Book, Review, User
from seed_data import BOOKS, REVIEWS, USERS, seed


def test_seed_replaces_existing_data(db_session, setup_test_data):
    seed(db_session)

    assert db_session.query(User).count() == len(USERS)
    assert db_session.query(Book).count() == len(BOOKS)
    assert db_session.query(Review).count() == len(REVIEWS)

    admin = db_session.query(User).filter(User.username == "Admin1").one()
    assert admin.role == "admin"
    assert verify_password("adminpass", admin.password_hash)


def test_seeded_catalogue_is_served(client, db_session):
    seed(db_session)

    books = client.get("/api/books").json()
    patterns = next(book for book in books if book["title"] == "Design Patterns")
    assert patterns["author"] == "Erich Gamma, Richard Helm, Ralph Johnson, John Vlissides"
    assert patterns["price"] == "54.95"
