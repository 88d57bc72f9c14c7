"""
Test Suite for paginated reviews, review creation and likes.
"""
from datetime import datetime, timedelta

import pytest

from models.models import Review


@pytest.fixture
def twelve_reviews(setup_test_data, db_session):
    """Twelve reviews of The Hobbit, review 0 being the newest."""
    hobbit = setup_test_data["books"][0]
    users = setup_test_data["users"]
    now = datetime.utcnow()
    reviews = [
        Review(
            book_id=hobbit.id,
            user_id=users["alice"].id if i % 2 == 0 else users["bob"].id,
            content=f"review {i}",
            created_at=now - timedelta(minutes=i),
        )
        for i in range(12)
    ]
    # Insert oldest first so ids and timestamps disagree
    db_session.add_all(reversed(reviews))
    db_session.commit()
    return {"book": hobbit, "reviews": reviews}

###############################################################################
#                          Pagination                                        #
###############################################################################

def test_second_page_of_five(client, twelve_reviews):
    book = twelve_reviews["book"]
    response = client.get(f"/api/books/{book.id}/reviews", params={"page": 2, "limit": 5})
    assert response.status_code == 200

    data = response.json()
    assert data["totalReviews"] == 12
    assert [review["content"] for review in data["reviews"]] == [f"review {i}" for i in range(5, 10)]


def test_default_window_is_first_ten(client, twelve_reviews):
    book = twelve_reviews["book"]
    data = client.get(f"/api/books/{book.id}/reviews").json()
    assert len(data["reviews"]) == 10
    assert data["reviews"][0]["content"] == "review 0"


def test_last_partial_page(client, twelve_reviews):
    book = twelve_reviews["book"]
    data = client.get(f"/api/books/{book.id}/reviews", params={"page": 3, "limit": 5}).json()
    assert [review["content"] for review in data["reviews"]] == ["review 10", "review 11"]


def test_reviews_carry_author_identity(client, twelve_reviews):
    book = twelve_reviews["book"]
    first = client.get(f"/api/books/{book.id}/reviews", params={"limit": 1}).json()["reviews"][0]
    assert first["username"] == "alice"
    assert first["profile_pic_url"] is None
    assert first["likes"] == 0
    assert set(first) == {"review_id", "book_id", "content", "created_at", "likes", "username", "profile_pic_url"}


def test_reviews_of_book_without_reviews(client, setup_test_data):
    book = setup_test_data["books"][1]
    assert client.get(f"/api/books/{book.id}/reviews").json() == {"reviews": [], "totalReviews": 0}


@pytest.mark.parametrize("params", [
    {"page": "abc"},
    {"limit": "ten"},
    {"page": "1.5"},
    {"page": "0"},
    {"limit": "-5"},
])
def test_invalid_pagination_window(client, twelve_reviews, params):
    book = twelve_reviews["book"]
    response = client.get(f"/api/books/{book.id}/reviews", params=params)
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_QUERY"


@pytest.mark.parametrize("params", [
    {"page": str(10 ** 30)},
    {"limit": str(10 ** 30)},
    {"page": str(2 ** 40), "limit": str(2 ** 40)},
    {"page": "1_0"},
    {"limit": "+5"},
])
def test_pagination_window_beyond_store_range(client, twelve_reviews, params):
    book = twelve_reviews["book"]
    response = client.get(f"/api/books/{book.id}/reviews", params=params)
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_QUERY"


def test_reviews_of_out_of_range_book_id(client, setup_test_data):
    response = client.get(f"/api/books/{10 ** 30}/reviews")
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"

###############################################################################
#                          Creating reviews                                  #
###############################################################################

def test_create_review(client, setup_test_data, auth_headers):
    book = setup_test_data["books"][2]
    bob = setup_test_data["users"]["bob"]
    response = client.post(f"/api/books/{book.id}/reviews", headers=auth_headers(bob), json={"content": "Hilarious."})
    assert response.status_code == 201

    data = response.json()
    assert data["book_id"] == book.id
    assert data["username"] == "bob"
    assert data["likes"] == 0

    page = client.get(f"/api/books/{book.id}/reviews").json()
    assert page["totalReviews"] == 1
    assert page["reviews"][0]["review_id"] == data["review_id"]


def test_create_review_without_token(client, setup_test_data):
    book = setup_test_data["books"][0]
    response = client.post(f"/api/books/{book.id}/reviews", json={"content": "Unauthorized review"})
    assert response.status_code == 401


def test_create_review_with_foreign_token(client, setup_test_data, auth_headers):
    book = setup_test_data["books"][0]
    headers = auth_headers(setup_test_data["users"]["bob"], secret="not-our-secret-key-so-the-gate-refuses-it")
    response = client.post(f"/api/books/{book.id}/reviews", headers=headers, json={"content": "Forged"})
    assert response.status_code == 403


def test_create_review_for_missing_book(client, setup_test_data, auth_headers, db_session):
    headers = auth_headers(setup_test_data["users"]["bob"])
    response = client.post("/api/books/999/reviews", headers=headers, json={"content": "Review for a non-existent book"})
    assert response.status_code == 404
    assert db_session.query(Review).count() == 0


def test_create_empty_review(client, setup_test_data, auth_headers):
    book = setup_test_data["books"][0]
    response = client.post(f"/api/books/{book.id}/reviews", headers=auth_headers(setup_test_data["users"]["bob"]), json={"content": ""})
    assert response.status_code == 400

###############################################################################
#                          Likes                                             #
###############################################################################

def test_like_twice_adds_two(client, twelve_reviews, db_session):
    review_id = twelve_reviews["reviews"][3].id
    for _ in range(2):
        response = client.post(f"/api/reviews/{review_id}/like")
        assert response.status_code == 200
        assert response.json() == {"success": True, "updated": 1}

    assert db_session.query(Review.likes).filter(Review.id == review_id).scalar() == 2
    assert db_session.query(Review).filter(Review.likes > 0).count() == 1


@pytest.mark.parametrize("review_id", ["9999", "0", "-1", str(10 ** 30), "-" + str(10 ** 30)])
def test_like_unknown_review_is_a_no_op(client, twelve_reviews, db_session, review_id):
    response = client.post(f"/api/reviews/{review_id}/like")
    assert response.status_code == 200
    assert response.json() == {"success": True, "updated": 0}
    assert db_session.query(Review).filter(Review.likes > 0).count() == 0


@pytest.mark.parametrize("review_id", ["abc", "1x", "2.5", "1_0", "+5"])
def test_like_with_non_integer_id(client, twelve_reviews, review_id):
    response = client.post(f"/api/reviews/{review_id}/like")
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_QUERY"
