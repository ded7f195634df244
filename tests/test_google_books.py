import asyncio

import httpx
import pytest

from reading_list.errors import ConfigurationError, UpstreamError
from reading_list.services.google_books_service import GOOGLE_BOOKS_VOLUMES_URL, SearchResult


def test_search_sends_key_and_limit(make_service, sample_volumes):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url).split("?")[0]
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=sample_volumes)

    service = make_service(handler, api_key="secret")
    results = asyncio.run(service.search_books("harry potter"))

    assert seen["url"] == GOOGLE_BOOKS_VOLUMES_URL
    assert seen["params"] == {"q": "harry potter", "key": "secret", "maxResults": "5"}
    assert [r.title for r in results] == ["Dune", "N/A"]


def test_search_caps_results_at_five(make_service):
    items = [{"volumeInfo": {"title": f"Book {i}"}} for i in range(8)]
    service = make_service(lambda request: httpx.Response(200, json={"totalItems": 8, "items": items}))

    results = asyncio.run(service.search_books("book"))
    assert [r.title for r in results] == [f"Book {i}" for i in range(5)]


def test_search_without_items(make_service):
    service = make_service(lambda request: httpx.Response(200, json={"totalItems": 0}))
    assert asyncio.run(service.search_books("zzzz")) == []


def test_search_without_key_makes_no_request(make_service):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    service = make_service(handler, api_key="")
    with pytest.raises(ConfigurationError):
        asyncio.run(service.search_books("dune"))
    assert calls == []


def test_search_non_success_raises_with_status(make_service):
    service = make_service(lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(service.search_books("dune"))
    assert excinfo.value.status_code == 503


def test_search_invalid_json(make_service):
    service = make_service(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(service.search_books("dune"))
    assert excinfo.value.status_code == 500


@pytest.mark.parametrize("body", [["x"], "x", {"items": "x"}, {"items": ["x"]}, {"items": [None]}])
def test_search_unexpected_payload_shape(make_service, body):
    service = make_service(lambda request: httpx.Response(200, json=body))
    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(service.search_books("dune"))
    assert excinfo.value.status_code == 500
    assert excinfo.value.message == "Failed to search books from external API."


def test_result_mapping_tolerates_wrong_nested_types():
    result = SearchResult.from_volume({"volumeInfo": {"title": "Dune", "authors": "Frank Herbert",
                                                      "imageLinks": "http://img"}})
    assert result.title == "Dune"
    assert result.author == "N/A"
    assert result.cover_image_url is None

    assert SearchResult.from_volume({"volumeInfo": "oops"}).title == "N/A"


def test_result_mapping():
    item = {
        "volumeInfo": {
            "title": "Good Omens",
            "authors": ["Terry Pratchett", "Neil Gaiman"],
            "imageLinks": {"smallThumbnail": "http://img/small.jpg"},
        }
    }
    result = SearchResult.from_volume(item)
    assert result.to_dict() == {
        "title": "Good Omens",
        "author": "Terry Pratchett, Neil Gaiman",
        "coverImageUrl": "http://img/small.jpg",
        "description": "No description available.",
    }
