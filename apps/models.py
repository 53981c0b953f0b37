"""
Model registration: import every table model here so SQLModel.metadata is complete
before schema creation. Add/remove imports when adding/removing apps.
"""
from apps.library.models import Author, Book

__all__ = ["Author", "Book"]
