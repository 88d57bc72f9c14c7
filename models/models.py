from sqlalchemy import Column, Integer, String, ForeignKey, Text, DateTime, Numeric
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database import Base, StringList

ROLE_USER = "user"
ROLE_ADMIN = "admin"

class User(Base):
    __tablename__ = "userz"

    id = Column(Integer, primary_key = True, index = True)
    username = Column(String, unique = True, nullable = False)
    email = Column(String, unique = True, nullable = False)
    password_hash = Column(String, nullable = False)
    role = Column(String, nullable = False, default = ROLE_USER)
    profile_pic_url = Column(String, nullable = True)

    #relationships
    reviews = relationship("Review", back_populates = "user")

class Book(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key = True, index = True)
    isbn = Column(String, unique = True, nullable = False)
    title = Column(String, nullable = False)
    author = Column(StringList, nullable = False, default = list)
    genre = Column(StringList, nullable = False, default = list)
    price = Column(Numeric(10, 2), nullable = False)
    image_url = Column(String, nullable = True)
    description = Column(Text, nullable = True)
    username = Column(String, nullable = False, default = "Admin")

    #sqlite only hands out fresh ids after a sequence reset when AUTOINCREMENT is on
    __table_args__ = {"sqlite_autoincrement": True}

    #relationships
    reviews = relationship("Review", back_populates = "book", cascade = "all, delete-orphan", passive_deletes = True)

class Review(Base):
    __tablename__ = "reviews"

    id = Column("review_id", Integer, primary_key = True, index = True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete = "CASCADE"), nullable = False, index = True)
    user_id = Column(Integer, ForeignKey("userz.id"), nullable = False)
    content = Column(Text, nullable = False)
    created_at = Column(DateTime, default = datetime.utcnow, nullable = False)
    updated_at = Column(DateTime, default = datetime.utcnow, onupdate = datetime.utcnow, nullable = False)
    likes = Column(Integer, default = 0, nullable = False)

    #realtionships
    user = relationship("User", back_populates = "reviews")
    book = relationship("Book", back_populates = "reviews")
