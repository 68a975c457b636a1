"""Data models for books, reading lists, reviews and users."""
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

# Inline SVG shown when a book has no usable cover
PLACEHOLDER_IMAGE = (
    "data:image/svg+xml;base64,PHN2ZyB3aWR0aD0iMzAwIiBoZWlnaHQ9IjQwMCIgeG1sbnM9"
    "Imh0dHA6Ly93d3cudzMub3JnLzIwMDAvc3ZnIj48cmVjdCB3aWR0aD0iMzAwIiBoZWlnaHQ9Ij"
    "QwMCIgZmlsbD0iI2YxZjVmOSIvPjx0ZXh0IHg9IjUwJSIgeT0iNTAlIiBmb250LWZhbWlseT0i"
    "QXJpYWwsIHNhbnMtc2VyaWYiIGZvbnQtc2l6ZT0iMTgiIGZpbGw9IiM5Y2EzYWYiIHRleHQtYW"
    "5jaG9yPSJtaWRkbGUiIGR5PSIuM2VtIj5ObyBDb3ZlciBJbWFnZTwvdGV4dD48L3N2Zz4="
)

# Opaque structure returned by the recommendation endpoint
Recommendation = Dict[str, Any]


@dataclass
class Book:
    """Catalog entry."""
    id: str
    title: str
    author: str
    description: str = ""
    genre: str = ""
    published_year: Optional[int] = None
    isbn: str = ""
    cover_image: str = ""
    rating: float = 0.0

    @property
    def cover_or_placeholder(self) -> str:
        """Cover URL, or the inline placeholder when none is set."""
        return self.cover_image or PLACEHOLDER_IMAGE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Book":
        return cls(
            id=str(data["id"]),
            title=data.get("title", "Unknown Title"),
            author=data.get("author", "Unknown"),
            description=data.get("description", ""),
            genre=data.get("genre", ""),
            published_year=data.get("publishedYear"),
            isbn=data.get("isbn", ""),
            cover_image=data.get("coverImage", ""),
            rating=float(data.get("rating") or 0.0)
        )

    def to_dict(self, include_id: bool = True) -> Dict[str, Any]:
        payload = {
            "title": self.title,
            "author": self.author,
            "description": self.description,
            "genre": self.genre,
            "publishedYear": self.published_year,
            "isbn": self.isbn,
            "coverImage": self.cover_image,
            "rating": self.rating,
        }
        if include_id:
            payload["id"] = self.id
        return payload


@dataclass
class ReadingList:
    """Named, user-owned ordered collection of book ids."""
    id: str
    name: str
    description: Optional[str] = None
    book_ids: List[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""
    user_id: Optional[str] = None

    @property
    def was_updated(self) -> bool:
        return self.updated_at != self.created_at

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReadingList":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            description=data.get("description"),
            book_ids=list(data.get("bookIds") or []),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", data.get("createdAt", "")),
            user_id=data.get("userId")
        )

    def to_update_payload(self) -> Dict[str, Any]:
        """
        Full record sent on every update.

        The API has no partial update, so name and description always
        travel with the complete ``bookIds`` sequence.
        """
        return {
            "name": self.name,
            "description": self.description,
            "bookIds": list(self.book_ids),
        }


@dataclass
class Review:
    """A user's rating and comment for one book."""
    id: str
    book_id: str
    user_id: str
    user_name: str
    rating: int
    comment: str
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Review":
        return cls(
            id=str(data["id"]),
            book_id=str(data.get("bookId", "")),
            user_id=str(data.get("userId", "")),
            user_name=data.get("userName", "Anonymous"),
            rating=int(data.get("rating", 0)),
            comment=data.get("comment", ""),
            created_at=data.get("createdAt", "")
        )


@dataclass
class User:
    """Signed-in user. ``role`` is derived client-side and is advisory only."""
    id: str
    email: str
    name: str
    role: str = "user"
    created_at: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
