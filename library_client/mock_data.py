"""Sample catalog served while the books endpoints are not deployed."""
from typing import List

from library_client.models import Book


MOCK_BOOKS: List[Book] = [
    Book(
        id="1",
        title="The Great Gatsby",
        author="F. Scott Fitzgerald",
        description="A classic American novel set in the Jazz Age, exploring "
                    "themes of wealth, love, and the American Dream.",
        genre="Fiction",
        published_year=1925,
        isbn="9780743273565",
        cover_image="https://images.unsplash.com/photo-1543002588-bfa74002ed7e?w=400",
        rating=4.5
    ),
    Book(
        id="2",
        title="To Kill a Mockingbird",
        author="Harper Lee",
        description="A gripping tale of racial injustice and childhood "
                    "innocence in the American South.",
        genre="Fiction",
        published_year=1960,
        isbn="9780061120084",
        cover_image="https://images.unsplash.com/photo-1512820790803-83ca734da794?w=400",
        rating=4.8
    ),
    Book(
        id="3",
        title="1984",
        author="George Orwell",
        description="A dystopian social science fiction novel and cautionary tale.",
        genre="Science Fiction",
        published_year=1949,
        isbn="9780451524935",
        cover_image="https://images.unsplash.com/photo-1495446815901-a7297e633e8d?w=400",
        rating=4.7
    ),
    Book(
        id="4",
        title="Pride and Prejudice",
        author="Jane Austen",
        description="A romantic novel of manners that critiques the British "
                    "landed gentry at the end of the 18th century.",
        genre="Romance",
        published_year=1813,
        isbn="9780141439518",
        cover_image="https://images.unsplash.com/photo-1544947950-fa07a98d237f?w=400",
        rating=4.6
    ),
    Book(
        id="5",
        title="The Hobbit",
        author="J.R.R. Tolkien",
        description="A fantasy novel about the quest of home-loving Bilbo Baggins.",
        genre="Fantasy",
        published_year=1937,
        isbn="9780547928227",
        cover_image="https://images.unsplash.com/photo-1621351183012-e2f9972dd9bf?w=400",
        rating=4.7
    ),
    Book(
        id="6",
        title="Sapiens",
        author="Yuval Noah Harari",
        description="A brief history of humankind, from the Stone Age to the "
                    "twenty-first century.",
        genre="Non-Fiction",
        published_year=2011,
        isbn="9780062316097",
        rating=4.4
    ),
]


def find_mock_book(book_id: str):
    """Return the mock book with ``book_id`` or None."""
    for book in MOCK_BOOKS:
        if book.id == book_id:
            return book
    return None
