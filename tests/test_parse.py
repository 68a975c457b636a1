"""Tests for parsing functions."""
import json

import pytest

from library_client.errors import ResponseFormatError
from library_client.models import Book
from library_client.parse import (
    DirectPayload,
    ProxyPayload,
    classify_envelope,
    deduplicate_books,
    extract_error_message,
    parse_book,
    parse_books_response,
    parse_reading_list,
    parse_reading_lists,
    parse_recommendations,
    parse_review,
    parse_reviews,
    repair_reading_list,
    unwrap_payload,
)


def test_parse_book_complete():
    """Test parsing a book with all fields present."""
    item = {
        "id": "abc123",
        "title": "Python Crash Course",
        "author": "Eric Matthes",
        "description": "A great book",
        "genre": "Programming",
        "publishedYear": 2019,
        "isbn": "9781593279288",
        "coverImage": "http://example.com/thumb.jpg",
        "rating": 4.6
    }

    book = parse_book(item)

    assert book is not None
    assert book.id == "abc123"
    assert book.title == "Python Crash Course"
    assert book.author == "Eric Matthes"
    assert book.published_year == 2019
    assert book.rating == 4.6


def test_parse_book_missing_fields():
    """Test parsing a book with missing optional fields."""
    book = parse_book({"id": "xyz789", "title": "Mystery Book"})

    assert book is not None
    assert book.title == "Mystery Book"
    assert book.description == ""
    assert book.published_year is None
    assert book.rating == 0.0
    assert book.cover_or_placeholder.startswith("data:image/svg+xml")


def test_parse_book_no_id():
    """Test that book without ID returns None."""
    assert parse_book({"title": "No ID Book"}) is None


def test_parse_books_response_skips_bad_records():
    books = parse_books_response([
        {"id": "1", "title": "Book 1"},
        {"title": "No id"},
        {"id": "2", "title": "Book 2", "rating": "not a number"},
        {"id": "3", "title": "Book 3"},
    ])

    assert [b.id for b in books] == ["1", "3"]


def test_parse_books_response_non_list_is_empty():
    assert parse_books_response({"items": []}) == []


def test_classify_envelope():
    assert classify_envelope({"body": "[]"}) == ProxyPayload("[]")
    assert classify_envelope([1, 2]) == DirectPayload([1, 2])
    # A non-string body is an ordinary field
    assert classify_envelope({"body": {"a": 1}}) == DirectPayload({"body": {"a": 1}})
    assert classify_envelope({"body": ""}) == DirectPayload({"body": ""})


@pytest.mark.parametrize("payload", [
    [{"id": "1", "title": "A"}],
    {"id": "rl-1", "bookIds": ["a"]},
    {"recommendations": [{"title": "Dune"}]},
])
def test_unwrap_is_transparent(payload):
    wrapped = {"statusCode": 200, "body": json.dumps(payload)}

    assert unwrap_payload(wrapped) == unwrap_payload(payload) == payload


def test_unwrap_invalid_body_raises():
    with pytest.raises(ResponseFormatError):
        unwrap_payload({"body": "{not json"})


def test_repair_renames_books_to_book_ids():
    repaired = repair_reading_list({"id": "1", "books": ["a", "b"]})

    assert repaired == {"id": "1", "bookIds": ["a", "b"]}


def test_repair_keeps_existing_book_ids():
    record = {"id": "1", "books": ["x"], "bookIds": ["a"]}

    assert repair_reading_list(record) is record


def test_parse_reading_list_from_legacy_shape():
    reading_list = parse_reading_list({
        "id": "rl-1",
        "name": "Classics",
        "books": ["1", "2"],
        "createdAt": "2024-01-05T10:00:00Z",
        "updatedAt": "2024-01-05T10:00:00Z"
    })

    assert reading_list.book_ids == ["1", "2"]
    assert not reading_list.was_updated


def test_parse_reading_list_without_book_ids_is_rejected():
    with pytest.raises(ResponseFormatError):
        parse_reading_list({"id": "rl-1", "name": "No ids"})


def test_parse_reading_lists_requires_list():
    with pytest.raises(ResponseFormatError):
        parse_reading_lists({"id": "rl-1"})


def test_parse_reviews_non_list_is_empty():
    assert parse_reviews({"message": "nope"}) == []


def test_parse_recommendations_shapes():
    recs = [{"title": "Dune", "reason": "Space politics"}]

    assert parse_recommendations({"recommendations": recs}) == recs
    assert parse_recommendations(recs) == recs
    with pytest.raises(ResponseFormatError):
        parse_recommendations({"result": recs})


def test_extract_error_message():
    assert extract_error_message({"message": "top"}) == "top"
    assert extract_error_message({"error": "quota"}) == "quota"
    assert extract_error_message({"body": json.dumps({"message": "nested"})}) == "nested"
    assert extract_error_message({"body": json.dumps({"error": "nested error"})}) == "nested error"
    assert extract_error_message({"body": {"message": "dict body"}}) == "dict body"
    assert extract_error_message({"body": "not json"}) is None
    assert extract_error_message(None) is None


def test_deduplicate_books():
    """Test deduplication by book ID."""
    books = [
        Book("1", "Book A", "Author"),
        Book("2", "Book B", "Author"),
        Book("1", "Book A Duplicate", "Author"),
    ]

    unique = deduplicate_books(books)

    assert len(unique) == 2
    assert unique[0].id == "1"
    assert unique[1].id == "2"
    assert unique[0].title == "Book A"


def test_parse_reading_lists_skips_malformed_records():
    lists = parse_reading_lists([
        None,
        "rl-0",
        {"name": "No id", "bookIds": []},
        {"id": "rl-1", "name": "Classics", "books": ["1"]},
        {"id": "rl-2", "name": "Empty"},
    ])

    assert [(l.id, l.book_ids) for l in lists] == [("rl-1", ["1"]), ("rl-2", [])]


def test_parse_reviews_skips_records_without_id():
    reviews = parse_reviews([
        {"bookId": "1", "rating": 5, "comment": "x"},
        None,
        {"id": "r1", "bookId": "1", "rating": 4, "comment": "y"},
    ])

    assert [r.id for r in reviews] == ["r1"]


def test_parse_review_without_id_is_rejected():
    with pytest.raises(ResponseFormatError):
        parse_review({"bookId": "1", "rating": 5, "comment": "x"})


def test_parse_reading_list_bad_book_ids_is_rejected():
    with pytest.raises(ResponseFormatError):
        parse_reading_list({"id": "rl-1", "name": "Broken", "bookIds": 7})
