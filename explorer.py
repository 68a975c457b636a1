#!/usr/bin/env python3
"""Library Explorer CLI - browse the catalog and manage reading lists."""
import argparse
import asyncio
import sys
import json
from dataclasses import asdict
from tabulate import tabulate
from library_client.async_client import AsyncLibraryApiClient
from library_client.auth import AuthSession, EnvTokenProvider
from library_client.client import LibraryApiClient
from library_client.config import Config
from library_client.models import User
from library_client.formatters import format_book_count, format_date, format_rating
from library_client.notifications import Notifier, ERROR
from library_client.views import (
    BookDetailView,
    ReadingListDetailView,
    ReadingListsView,
    RecommendationsView,
)
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_client(config: Config) -> LibraryApiClient:
    """Create the API client from configuration."""
    return LibraryApiClient(
        config.API_BASE_URL,
        identity=EnvTokenProvider(config.API_TOKEN),
        timeout=config.DEFAULT_TIMEOUT,
        mock_latency=config.MOCK_LATENCY,
        use_mock_catalog=config.USE_MOCK_CATALOG
    )


def truncate(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


def display_books(books, format_type: str):
    """Display books in specified format."""
    if format_type == "table":
        headers = ["ID", "Title", "Author", "Genre", "Year", "Rating"]
        rows = [
            [
                book.id,
                truncate(book.title, 50),
                truncate(book.author, 30),
                book.genre or "-",
                book.published_year or "Unknown",
                format_rating(book.rating)
            ]
            for book in books
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps([book.to_dict() for book in books], indent=2))

    elif format_type == "compact":
        for i, book in enumerate(books, 1):
            print(f"{i}. {book.title} - {book.author}")


def display_reviews(reviews, format_type: str):
    if format_type == "json":
        print(json.dumps([asdict(review) for review in reviews], indent=2))
        return

    if not reviews:
        print("No reviews yet.")
        return

    headers = ["Rating", "User", "Date", "Comment"]
    rows = [
        [
            format_rating(review.rating),
            review.user_name,
            format_date(review.created_at),
            truncate(review.comment, 60)
        ]
        for review in reviews
    ]
    print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))


def display_reading_lists(reading_lists, format_type: str):
    if format_type == "json":
        print(json.dumps([asdict(l) for l in reading_lists], indent=2))
        return

    headers = ["ID", "Name", "Books", "Created", "Updated"]
    rows = [
        [
            l.id,
            truncate(l.name, 40),
            format_book_count(len(l.book_ids)),
            format_date(l.created_at),
            format_date(l.updated_at) if l.was_updated else ""
        ]
        for l in reading_lists
    ]
    print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))


def flush_notices(notifier: Notifier) -> bool:
    """Print pending notices; return False if any of them was an error."""
    ok = True
    for notice in notifier.drain():
        if notice.level == ERROR:
            ok = False
            print(f"❌ {notice.message}")
        else:
            print(f"✅ {notice.message}")
    return ok


def list_books(args, config: Config, notifier: Notifier) -> bool:
    with build_client(config) as client:
        books = client.get_books()
    logger.info(f"Found {len(books)} books")
    display_books(books, args.format)
    return True


def show_book(args, config: Config, notifier: Notifier) -> bool:
    """Show one book with its reviews, fetched concurrently."""
    async def load():
        async with AsyncLibraryApiClient(
            config.API_BASE_URL,
            identity=EnvTokenProvider(config.API_TOKEN),
            timeout=config.DEFAULT_TIMEOUT,
            max_concurrent=config.MAX_CONCURRENT,
            mock_latency=config.MOCK_LATENCY,
            use_mock_catalog=config.USE_MOCK_CATALOG
        ) as client:
            return await client.load_book_page(args.book_id)

    book, reviews = asyncio.run(load())
    if book is None:
        print(f"Book {args.book_id} not found")
        return False

    display_books([book], args.format)
    if args.format != "json":
        print(f"\n{book.description}\n")
    display_reviews(reviews, args.format)
    return True


def write_review(args, config: Config, notifier: Notifier) -> bool:
    with build_client(config) as client:
        view = BookDetailView(client, notifier)
        if not view.load(args.book_id):
            print(f"Book {args.book_id} not found")
            return False
        # The token provider has no profile; post as the configured reviewer
        view.auth = AuthSession(client.identity, config.ADMIN_EMAILS)
        view.auth.user = User(id=args.user_id, email="", name=args.user_name)
        view.submit_review(args.rating, args.comment)
    return flush_notices(notifier)


def show_lists(args, config: Config, notifier: Notifier) -> bool:
    with build_client(config) as client:
        view = ReadingListsView(client, notifier)
        if view.load():
            display_reading_lists(view.reading_lists, args.format)
    return flush_notices(notifier)


def show_list(args, config: Config, notifier: Notifier) -> bool:
    with build_client(config) as client:
        view = ReadingListDetailView(client, notifier)
        if view.load(args.list_id):
            reading_list = view.reading_list
            print(f"\n{reading_list.name}")
            if reading_list.description:
                print(reading_list.description)
            print(f"{format_book_count(len(view.books))} · Created {format_date(reading_list.created_at)}")
            display_books(view.books, args.format)
    return flush_notices(notifier)


def create_list(args, config: Config, notifier: Notifier) -> bool:
    with build_client(config) as client:
        view = ReadingListsView(client, notifier)
        reading_list = view.create(args.name, args.description)
        if reading_list:
            print(f"Created reading list {reading_list.id}")
    return flush_notices(notifier)


def add_to_list(args, config: Config, notifier: Notifier) -> bool:
    with build_client(config) as client:
        view = BookDetailView(client, notifier)
        if not view.load(args.book_id):
            print(f"Book {args.book_id} not found")
            return False
        if view.load_reading_lists():
            view.add_to_list(args.list_id)
    return flush_notices(notifier)


def remove_from_list(args, config: Config, notifier: Notifier) -> bool:
    with build_client(config) as client:
        view = ReadingListDetailView(client, notifier)
        if view.load(args.list_id):
            view.remove_book(args.book_id)
    return flush_notices(notifier)


def delete_list(args, config: Config, notifier: Notifier) -> bool:
    with build_client(config) as client:
        view = ReadingListDetailView(client, notifier)
        if view.load(args.list_id):
            view.delete()
    return flush_notices(notifier)


def recommend(args, config: Config, notifier: Notifier) -> bool:
    with build_client(config) as client:
        view = RecommendationsView(client, notifier)
        if view.ask(args.query):
            print(json.dumps(view.recommendations, indent=2))
    return flush_notices(notifier)


COMMANDS = {
    "books": list_books,
    "book": show_book,
    "review": write_review,
    "lists": show_lists,
    "list": show_list,
    "list-create": create_list,
    "list-add": add_to_list,
    "list-remove": remove_from_list,
    "list-delete": delete_list,
    "recommend": recommend,
}


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Library Explorer - catalog, reading lists and recommendations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Browse the catalog
  %(prog)s books --format compact

  # A book and its reviews
  %(prog)s book 3

  # Manage reading lists (needs LIBRARY_API_TOKEN)
  %(prog)s list-create "Summer reads" --description "Beach books"
  %(prog)s list-add <list-id> 3
  %(prog)s list-remove <list-id> 3

  # Ask for recommendations
  %(prog)s recommend "space opera with strong characters"
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")
    formats = ["table", "json", "compact"]

    books_parser = subparsers.add_parser("books", help="List the catalog")
    books_parser.add_argument("--format", choices=formats, default="table", help="Output format")

    book_parser = subparsers.add_parser("book", help="Show a book and its reviews")
    book_parser.add_argument("book_id", help="Book ID")
    book_parser.add_argument("--format", choices=formats, default="table", help="Output format")

    review_parser = subparsers.add_parser("review", help="Write a review")
    review_parser.add_argument("book_id", help="Book ID")
    review_parser.add_argument("--rating", type=int, default=5, help="Stars 1-5 (default: 5)")
    review_parser.add_argument("--comment", required=True, help="Review text")
    review_parser.add_argument("--user-id", required=True, help="Reviewer user ID")
    review_parser.add_argument("--user-name", required=True, help="Reviewer display name")

    lists_parser = subparsers.add_parser("lists", help="Show your reading lists")
    lists_parser.add_argument("--format", choices=["table", "json"], default="table", help="Output format")

    list_parser = subparsers.add_parser("list", help="Show one reading list")
    list_parser.add_argument("list_id", help="Reading list ID")
    list_parser.add_argument("--format", choices=formats, default="table", help="Output format")

    create_parser = subparsers.add_parser("list-create", help="Create a reading list")
    create_parser.add_argument("name", help="List name")
    create_parser.add_argument("--description", help="Optional description")

    add_parser = subparsers.add_parser("list-add", help="Add a book to a reading list")
    add_parser.add_argument("list_id", help="Reading list ID")
    add_parser.add_argument("book_id", help="Book ID")

    remove_parser = subparsers.add_parser("list-remove", help="Remove a book from a reading list")
    remove_parser.add_argument("list_id", help="Reading list ID")
    remove_parser.add_argument("book_id", help="Book ID")

    delete_parser = subparsers.add_parser("list-delete", help="Delete a reading list")
    delete_parser.add_argument("list_id", help="Reading list ID")

    recommend_parser = subparsers.add_parser("recommend", help="Get AI recommendations")
    recommend_parser.add_argument("query", help="What you are in the mood for")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()
    notifier = Notifier()

    try:
        ok = COMMANDS[args.command](args, config, notifier)
    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
