"""
Main Application Entry Point

This module initializes the FastAPI application, sets up logging, CORS,
error handlers and API routes, and ensures database tables exist on startup.

Dependencies:
    - FastAPI for building the API
    - SQLAlchemy for database interactions
    - Application-specific modules (auth, users, books, reviews)
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.database import init_db
from app.errors import setup_exception_handlers
from config import get_settings
from routes import auth, users, books, reviews

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

settings = get_settings()

# -----------------------------------
# FastAPI Application Initialization
# -----------------------------------
app = FastAPI(
    title="Bookstore API",
    description="A bookstore API for managing the book catalogue, searching it, and reading, writing and liking book reviews.",
    version="1.0.0"
)

# -----------------------------------
# CORS Configuration
# -----------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# -----------------------------------
# Register API Routes
# -----------------------------------
app.include_router(auth.router)# Registration and login
app.include_router(users.router) # User listing and profile management
app.include_router(books.router) # Catalogue management and search
app.include_router(reviews.router) # Review management routes

@app.on_event("startup")
def startup_event():
    init_db()

# -----------------------------------
# Root Endpoint
# -----------------------------------
@app.get("/", tags=["General"])
def home():
    """Root endpoint that returns a welcome message."""
    return{"message": "Welcome to the Bookstore API"}

# -----------------------------------
# Run uvicorn (local dev)
# -----------------------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port)
