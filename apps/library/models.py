from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional

class Author(SQLModel, table=True):
    __tablename__ = "authors"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, max_length=255)
    books: List["Book"] = Relationship(back_populates="author")

class Book(SQLModel, table=True):
    __tablename__ = "books"
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(index=True, max_length=255)
    author_id: Optional[int] = Field(default=None, foreign_key="authors.id", index=True)
    author: Optional[Author] = Relationship(back_populates="books")
