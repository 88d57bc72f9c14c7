"""
Book Catalogue API Module

This module provides the catalogue operations: listing and fetching books,
creating them one at a time or in an atomic batch, replacing their descriptive
fields, deleting them singly, by id list or all at once, and the three
criteria-based queries (search, advanced search, filter).

Dependencies:
- FastAPI for API routing
- SQLAlchemy for database interactions
- Pydantic for request validation and response formatting
"""
from typing import Annotated, Any, List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, Response, status
from sqlalchemy.orm import Session

from app.database import INTEGER_MAX, INTEGER_MIN, get_db
from schemas.schemas import BookCreate, BookIds, BookResponse, BookUpdate, MessageResponse
from services import catalogue

BookId = Annotated[int, Path(ge = INTEGER_MIN, le = INTEGER_MAX)]

router = APIRouter(
    prefix = "/api",
    tags = ["Books"]
)

BOOK_EXAMPLE = {
    "id": 1,
    "isbn": "9780261103573",
    "title": "The Fellowship of the Ring",
    "author": "J. R. R. Tolkien",
    "genre": "Fantasy, Adventure",
    "price": "12.99",
    "image_url": "https://example.com/fellowship.jpg",
    "description": "The first volume of The Lord of the Rings.",
    "username": "Admin",
}

@router.get(
    "/books",
    response_model = List[BookResponse],
    summary = "Retrieve all the books in the catalogue",
    description = "Authors and genres are joined into comma separated strings and the price is rendered with two decimals.",
    responses = {200: {"content": {"application/json": {"example": [BOOK_EXAMPLE]}}}})
def get_books(db: Session = Depends(get_db)):
    return catalogue.list_books(db)

@router.get(
    "/books/{book_id}",
    response_model = BookResponse,
    summary = "Retrieve one book",
    responses = {404: {"description": "No book with this id"}})
def get_book(book_id: BookId, db: Session = Depends(get_db)):
    return catalogue.get_book(db, book_id)

@router.post("/books", response_model = BookResponse, status_code = status.HTTP_201_CREATED, summary = "Add a book")
def create_book(book_data: BookCreate, db: Session = Depends(get_db)):
    return catalogue.create_book(db, book_data)

@router.post(
    "/books/bulk",
    response_model = MessageResponse,
    status_code = status.HTTP_201_CREATED,
    summary = "Add many books at once",
    description = """Every book must carry an ISBN, a title and a price. The batch is validated before
    anything is written and inserted in a single transaction: either every book is stored or none is.""",
    responses = {400: {"description": "The batch is not an array, a book is incomplete, or a book violates a constraint"}})
def create_books(books: Any = Body(...), db: Session = Depends(get_db)):
    created = catalogue.create_books(db, books)
    return {"message": f"{len(created)} books added successfully"}

@router.put(
    "/books/{book_id}",
    response_model = BookResponse,
    summary = "Replace the descriptive fields of a book",
    responses = {404: {"description": "No book with this id"}})
def update_book(book_id: BookId, book_data: BookUpdate, db: Session = Depends(get_db)):
    return catalogue.update_book(db, book_id, book_data)

@router.delete("/books/{book_id}", status_code = status.HTTP_204_NO_CONTENT, response_class = Response, summary = "Delete a book")
def delete_book(book_id: BookId, db: Session = Depends(get_db)):
    catalogue.delete_book(db, book_id)
    return Response(status_code = status.HTTP_204_NO_CONTENT)

@router.post("/books/multiple", response_model = MessageResponse, summary = "Delete the books with the given ids")
def delete_books(payload: BookIds, db: Session = Depends(get_db)):
    deleted = catalogue.delete_books(db, payload.ids)
    return {"message": f"{deleted} books deleted successfully"}

@router.delete("/books", response_model = MessageResponse, summary = "Delete every book and reset the id sequence")
def delete_all_books(db: Session = Depends(get_db)):
    catalogue.delete_all_books(db)
    return {"message": "All books deleted successfully, and ID sequence reset"}

# -----------------------------------
# Criteria queries
# -----------------------------------

@router.get(
    "/search",
    response_model = List[BookResponse],
    summary = "Search books",
    description = """`query` matches title, author or genre (case-insensitive substring), `genre` must match
    one of the book's genres exactly, `author` is a case-insensitive substring, and `minPrice`/`maxPrice`
    are inclusive bounds. Every criterion is optional.""",
    responses = {400: {"description": "A price bound is not a number"}})
def search_books(
    query: Optional[str] = None,
    genre: Optional[str] = None,
    author: Optional[str] = None,
    min_price: Optional[str] = Query(None, alias = "minPrice"),
    max_price: Optional[str] = Query(None, alias = "maxPrice"),
    db: Session = Depends(get_db)):
    return catalogue.search_books(db, query, genre, author, min_price, max_price)

@router.get(
    "/advanced-search",
    response_model = List[BookResponse],
    summary = "Search books field by field",
    description = "`title`, `author` and `genre` are case-insensitive substrings; `minPrice`/`maxPrice` are inclusive bounds.",
    responses = {400: {"description": "A price bound is not a number"}})
def advanced_search_books(
    title: Optional[str] = None,
    author: Optional[str] = None,
    genre: Optional[str] = None,
    min_price: Optional[str] = Query(None, alias = "minPrice"),
    max_price: Optional[str] = Query(None, alias = "maxPrice"),
    db: Session = Depends(get_db)):
    return catalogue.advanced_search_books(db, title, author, genre, min_price, max_price)

@router.get(
    "/filter",
    response_model = List[BookResponse],
    summary = "Filter books by genre, author and price range",
    description = "`genre` and `author` must equal one of the book's genres/authors exactly.",
    responses = {400: {"description": "A price bound is not a number"}})
def filter_books(
    genre: Optional[str] = None,
    author: Optional[str] = None,
    min_price: Optional[str] = Query(None, alias = "minPrice"),
    max_price: Optional[str] = Query(None, alias = "maxPrice"),
    db: Session = Depends(get_db)):
    return catalogue.filter_books(db, genre, author, min_price, max_price)
