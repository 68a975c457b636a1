"""Page-level controllers: API calls plus the client-side state a page holds.

Each action performs one request and waits for the server before touching
local state, so a failed request leaves the view exactly as it was and only
adds an error notice.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Optional, List

from library_client.auth import AuthSession
from library_client.client import LibraryApiClient
from library_client.errors import LibraryError, NotFoundError, ValidationError
from library_client.models import Book, ReadingList, Review, Recommendation
from library_client.notifications import Notifier
from library_client.parse import deduplicate_books
from library_client.validation import validate_rating, validate_required, validate_signup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListSnapshot:
    """A reading list together with its resolved books.

    Both halves are always replaced together.
    """
    reading_list: ReadingList
    books: List[Book] = field(default_factory=list)


class ReadingListDetailView:
    """One reading list and the books it contains."""

    def __init__(self, client: LibraryApiClient, notifier: Notifier):
        self.client = client
        self.notifier = notifier
        self.snapshot: Optional[ListSnapshot] = None
        self.is_loading = False

    @property
    def reading_list(self) -> Optional[ReadingList]:
        return self.snapshot.reading_list if self.snapshot else None

    @property
    def books(self) -> List[Book]:
        return list(self.snapshot.books) if self.snapshot else []

    def load(self, list_id: str) -> bool:
        """
        Load a reading list and resolve its books from the catalog.

        Returns:
            False when the list does not exist or loading failed
        """
        self.is_loading = True
        try:
            lists = self.client.get_reading_lists()
            reading_list = next((l for l in lists if l.id == list_id), None)
            if reading_list is None:
                raise NotFoundError(f"Reading list {list_id} not found")

            books = []
            if reading_list.book_ids:
                catalog = deduplicate_books(self.client.get_books())
                books = [book for book in catalog if book.id in reading_list.book_ids]

            self.snapshot = ListSnapshot(reading_list, books)
            return True
        except LibraryError as e:
            self.notifier.handle_error(e)
            return False
        finally:
            self.is_loading = False

    def remove_book(self, book_id: str) -> bool:
        """
        Remove a book from the list.

        The list is persisted first; only after the server accepts it are
        ``book_ids`` and the resolved books replaced in one step.

        Returns:
            True if the book was removed
        """
        if self.snapshot is None:
            return False

        current = self.snapshot.reading_list
        if book_id not in current.book_ids:
            self.notifier.info("Book is not in this reading list")
            return False

        updated = replace(current, book_ids=[i for i in current.book_ids if i != book_id])
        try:
            stored = self.client.update_reading_list(current.id, updated.to_update_payload())
        except LibraryError as e:
            self.notifier.handle_error(e)
            return False

        # Keep the ids we sent; the server copy only refreshes metadata
        reading_list = replace(stored, book_ids=updated.book_ids)
        books = [book for book in self.snapshot.books if book.id != book_id]
        self.snapshot = ListSnapshot(reading_list, books)
        self.notifier.success("Book removed from list!")
        return True

    def delete(self) -> bool:
        if self.snapshot is None:
            return False
        try:
            self.client.delete_reading_list(self.snapshot.reading_list.id)
        except LibraryError as e:
            self.notifier.handle_error(e)
            return False
        self.snapshot = None
        self.notifier.success("Reading list deleted successfully!")
        return True


class ReadingListsView:
    """The signed-in user's reading lists."""

    def __init__(self, client: LibraryApiClient, notifier: Notifier):
        self.client = client
        self.notifier = notifier
        self.reading_lists: List[ReadingList] = []

    def load(self) -> bool:
        try:
            self.reading_lists = self.client.get_reading_lists()
            return True
        except LibraryError as e:
            self.notifier.handle_error(e)
            return False

    def create(self, name: str, description: Optional[str] = None) -> Optional[ReadingList]:
        try:
            if not validate_required(name):
                raise ValidationError({"name": "List name is required"})
            reading_list = self.client.create_reading_list(name.strip(), description or None)
        except LibraryError as e:
            self.notifier.handle_error(e)
            return None
        self.reading_lists = self.reading_lists + [reading_list]
        self.notifier.success("Reading list created successfully!")
        return reading_list


class BookDetailView:
    """A single book, its reviews, and the add-to-list picker."""

    def __init__(
        self,
        client: LibraryApiClient,
        notifier: Notifier,
        auth: Optional[AuthSession] = None
    ):
        self.client = client
        self.notifier = notifier
        self.auth = auth
        self.book: Optional[Book] = None
        self.reviews: List[Review] = []
        self.reading_lists: List[ReadingList] = []

    def load(self, book_id: str) -> bool:
        """
        Load the book and its reviews.

        Returns:
            False when the book does not exist
        """
        try:
            self.book = self.client.get_book(book_id)
        except LibraryError as e:
            self.notifier.handle_error(e)
            return False
        if self.book is None:
            return False

        self.load_reviews()
        return True

    def load_reviews(self):
        if self.book is None:
            return
        try:
            self.reviews = self.client.get_reviews(self.book.id)
        except LibraryError as e:
            self.notifier.handle_error(e)

    def load_reading_lists(self) -> bool:
        try:
            self.reading_lists = self.client.get_reading_lists()
            return True
        except LibraryError as e:
            self.notifier.handle_error(e)
            return False

    def add_to_list(self, list_id: str) -> bool:
        """
        Append the current book to one of the user's lists.

        A book that is already in the list is reported, not duplicated.

        Returns:
            True if the list was updated
        """
        if self.book is None:
            return False

        try:
            index, reading_list = next(
                ((i, l) for i, l in enumerate(self.reading_lists) if l.id == list_id),
                (None, None)
            )
            if reading_list is None:
                raise NotFoundError("Reading list not found")

            if self.book.id in reading_list.book_ids:
                self.notifier.success("Book is already in this reading list!")
                return False

            updated = replace(reading_list, book_ids=reading_list.book_ids + [self.book.id])
            stored = self.client.update_reading_list(list_id, updated.to_update_payload())
        except LibraryError as e:
            self.notifier.handle_error(e)
            return False

        self.reading_lists = (
            self.reading_lists[:index]
            + [replace(stored, book_ids=updated.book_ids)]
            + self.reading_lists[index + 1:]
        )
        self.notifier.success(f'Added "{self.book.title}" to "{reading_list.name}"!')
        return True

    def submit_review(self, rating: int, comment: str) -> Optional[Review]:
        user = self.auth.user if self.auth else None
        if self.book is None or user is None or not validate_required(comment):
            self.notifier.handle_error(
                ValidationError({"comment": "Please enter a review comment"})
            )
            return None
        if not validate_rating(rating):
            self.notifier.handle_error(
                ValidationError({"rating": "Rating must be between 1 and 5"})
            )
            return None

        try:
            review = self.client.create_review(
                book_id=self.book.id,
                user_id=user.id,
                user_name=user.name,
                rating=rating,
                comment=comment.strip()
            )
        except LibraryError as e:
            self.notifier.handle_error(e)
            return None

        self.reviews = [review] + self.reviews
        self.notifier.success("Review submitted successfully!")
        return review


class RecommendationsView:
    def __init__(self, client: LibraryApiClient, notifier: Notifier):
        self.client = client
        self.notifier = notifier
        self.recommendations: List[Recommendation] = []

    def ask(self, query: str) -> bool:
        try:
            if not validate_required(query):
                raise ValidationError({"query": "Please describe what you would like to read"})
            self.recommendations = self.client.get_recommendations(query.strip())
        except LibraryError as e:
            self.notifier.handle_error(e)
            return False
        return True


class SignupFlow:
    """Two-step signup: account details, then the emailed verification code."""

    def __init__(self, auth: AuthSession, notifier: Notifier):
        self.auth = auth
        self.notifier = notifier
        self.email = ""
        self.errors = {}
        self.needs_verification = False
        self.completed = False

    def submit(self, name: str, email: str, password: str, confirm_password: str) -> bool:
        self.errors = validate_signup(name, email, password, confirm_password)
        if self.errors:
            return False

        try:
            self.auth.signup(email, password, name)
        except Exception as e:
            # Provider errors share no base class
            self.notifier.handle_error(e)
            return False

        self.email = email
        self.needs_verification = True
        return True

    def verify(self, code: str) -> bool:
        if not self.needs_verification:
            return False
        if not validate_required(code):
            self.errors = {"verification_code": "Verification code is required"}
            return False

        try:
            self.auth.confirm_signup(self.email, code.strip())
        except Exception as e:
            self.notifier.handle_error(e)
            return False

        self.errors = {}
        self.completed = True
        self.notifier.success("Account verified. You can now sign in.")
        return True
