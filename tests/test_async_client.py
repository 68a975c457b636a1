"""Tests for the async API client."""
import json

import httpx
import pytest

from conftest import BASE_URL, proxy_wrapped
from library_client.async_client import AsyncLibraryApiClient
from library_client.errors import ApiError, RateLimitError, TransportError


def make_client(handler, identity=None, **kwargs):
    kwargs.setdefault("mock_latency", 0)
    kwargs.setdefault("use_mock_catalog", False)
    return AsyncLibraryApiClient(
        BASE_URL,
        identity=identity,
        transport=httpx.MockTransport(handler),
        **kwargs
    )


@pytest.mark.asyncio
async def test_get_reviews_unwraps_proxy_body():
    def handler(request):
        assert request.url.path == "/dev/books/3/reviews"
        assert "authorization" not in request.headers
        return httpx.Response(200, json=proxy_wrapped([
            {"id": "r1", "bookId": "3", "userId": "u1", "userName": "Ada",
             "rating": 4, "comment": "Good"}
        ]))

    async with make_client(handler) as client:
        reviews = await client.get_reviews("3")

    assert [r.id for r in reviews] == ["r1"]


@pytest.mark.asyncio
async def test_get_reading_lists_sends_token(identity):
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json=[{"id": "rl-1", "name": "A", "books": ["1"]}])

    async with make_client(handler, identity=identity) as client:
        lists = await client.get_reading_lists()

    assert seen["auth"] == "Bearer id-token-123"
    assert lists[0].book_ids == ["1"]


@pytest.mark.asyncio
async def test_get_reviews_for_books_in_parallel():
    def handler(request):
        book_id = request.url.path.split("/")[-2]
        return httpx.Response(200, json=[
            {"id": f"r-{book_id}", "bookId": book_id, "rating": 5, "comment": "!"}
        ])

    async with make_client(handler, max_concurrent=2) as client:
        reviews, errors = await client.get_reviews_for_books(["1", "2", "3"])

    assert errors == {}
    assert {k: [r.id for r in v] for k, v in reviews.items()} == {
        "1": ["r-1"], "2": ["r-2"], "3": ["r-3"],
    }


@pytest.mark.asyncio
async def test_get_reviews_for_books_keeps_results_when_one_fails():
    def handler(request):
        book_id = request.url.path.split("/")[-2]
        if book_id == "2":
            return httpx.Response(500, json={"message": "Table throttled"})
        return httpx.Response(200, json=[
            {"id": f"r-{book_id}", "bookId": book_id, "rating": 4, "comment": "ok"}
        ])

    async with make_client(handler) as client:
        reviews, errors = await client.get_reviews_for_books(["1", "2", "3"])

    assert sorted(reviews) == ["1", "3"]
    assert list(errors) == ["2"]
    assert isinstance(errors["2"], ApiError)
    assert errors["2"].detail == "Table throttled"


@pytest.mark.asyncio
async def test_load_book_page():
    def handler(request):
        return httpx.Response(200, json=[])

    async with make_client(handler) as client:
        book, reviews = await client.load_book_page("2")

    assert book.title == "To Kill a Mockingbird"
    assert reviews == []


@pytest.mark.asyncio
async def test_live_catalog():
    def handler(request):
        assert request.url.path == "/dev/books"
        return httpx.Response(200, json={"body": json.dumps([{"id": "9", "title": "X"}])})

    async with make_client(handler) as client:
        books = await client.get_books()

    assert [b.id for b in books] == ["9"]


@pytest.mark.asyncio
async def test_rate_limited_recommendations():
    def handler(request):
        assert json.loads(request.content) == {"query": "poetry"}
        return httpx.Response(429, json={"error": "Slow down"})

    async with make_client(handler) as client:
        with pytest.raises(RateLimitError, match="Slow down"):
            await client.get_recommendations("poetry")


@pytest.mark.asyncio
async def test_server_error():
    def handler(request):
        return httpx.Response(503, json={"message": "Maintenance"})

    async with make_client(handler) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.get_reading_lists()

    assert exc_info.value.status == 503
    assert exc_info.value.detail == "Maintenance"


@pytest.mark.asyncio
async def test_transport_failure():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async with make_client(handler) as client:
        with pytest.raises(TransportError):
            await client.get_reviews("1")
