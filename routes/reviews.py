"""
Book review API Module

This module provides the review operations: reading the reviews of one book
page by page, posting a new review, and liking a review.

Dependencies:
- FastAPI for API routing
- SQLAlchemy for database interactions
- Security utilities for authentication
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.query_builder import PaginationWindow, parse_int
from app.security import Claim, get_current_claim
from routes.books import BookId
from schemas.schemas import LikeResponse, ReviewCreate, ReviewPage, ReviewResponse
from services import reviews

router = APIRouter(
    prefix = "/api",
    tags = ["Reviews"]
)

REVIEW_EXAMPLE = {
    "review_id": 1,
    "book_id": 101,
    "content": "Sample review",
    "created_at": "2024-02-19T14:25:36.123456",
    "likes": 3,
    "username": "alice",
    "profile_pic_url": "https://res.cloudinary.com/demo/image/upload/alice.jpg",
}

@router.get(
    "/books/{book_id}/reviews",
    response_model = ReviewPage,
    summary = "Retrieve one page of the reviews of a book",
    description = """Allows the users (no login required) to read the reviews of a book, newest first.

    -**page**: 1-based page number, defaults to 1.
    -**limit**: reviews per page, defaults to 10.

    `totalReviews` is the number of reviews of the book across all pages.""",
    responses = {
        200: {
            "description": "One page of reviews with the total count.",
            "content": {"application/json": {"example": {"reviews": [REVIEW_EXAMPLE], "totalReviews": 12}}},
        },
        400: {"description": "page or limit is not a positive integer"},
    })
def get_reviews(book_id: BookId, page: Optional[str] = None, limit: Optional[str] = None, db: Session = Depends(get_db)):
    window = PaginationWindow.parse(page, limit)
    page_reviews, total = reviews.get_reviews_page(db, book_id, window)
    return {"reviews": page_reviews, "totalReviews": total}

@router.post(
    "/books/{book_id}/reviews",
    response_model = ReviewResponse,
    status_code = status.HTTP_201_CREATED,
    summary = "Create a new review for a book",
    description = """Allows the users to create a new review for a book.

    **Authentication Required**
      - This endpoint requires a valid JWT token.""",
    responses = {
        201: {"content": {"application/json": {"example": REVIEW_EXAMPLE}}},
        401: {"description": "Missing authentication token."},
        403: {"description": "Invalid or expired authentication token."},
        404: {"description": "Book not found"},
    })
def create_review(book_id: BookId, review_data: ReviewCreate, db: Session = Depends(get_db), claim: Claim = Depends(get_current_claim)):
    return reviews.create_review(db, book_id, claim.id, review_data.content)

@router.post(
    "/reviews/{review_id}/like",
    response_model = LikeResponse,
    summary = "Like a review",
    description = """Adds one like to the review. Liking an unknown review is not an error:
    the response reports `updated: 0` instead of `updated: 1`.""",
    responses = {400: {"description": "review_id is not an integer"}})
def like_review(review_id: str, db: Session = Depends(get_db)):
    updated = reviews.like_review(db, parse_int(review_id, "review_id"))
    return {"success": True, "updated": updated}
