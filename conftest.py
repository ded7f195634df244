import httpx
import pytest
from fastapi.testclient import TestClient

from reading_list.api import app, get_library, get_search_service
from reading_list.library import Library
from reading_list.services.google_books_service import GoogleBooksService
from reading_list.services.http_client import SharedHTTPClient

SAMPLE_VOLUMES = {
    "totalItems": 2,
    "items": [
        {
            "id": "abc",
            "volumeInfo": {
                "title": "Dune",
                "authors": ["Frank Herbert"],
                "description": "Desert planet.",
                "imageLinks": {"smallThumbnail": "http://img/small.jpg", "thumbnail": "http://img/dune.jpg"},
            },
        },
        {"id": "def", "volumeInfo": {}},
    ],
}


@pytest.fixture
def lib(tmp_path, request):
    # A separate database file for every test
    db_file = str(tmp_path / f"test_{request.node.name}.db")
    return Library(db_file=db_file)


def make_search_service(handler=None, api_key="test-key") -> GoogleBooksService:
    """GoogleBooksService whose HTTP calls are answered by ``handler``."""
    if handler is None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=SAMPLE_VOLUMES)
    http_client = SharedHTTPClient(transport=httpx.MockTransport(handler))
    return GoogleBooksService(api_key=api_key, http_client=http_client)


@pytest.fixture
def search_service():
    return make_search_service()


@pytest.fixture
def api_app(lib, search_service):
    app.dependency_overrides[get_library] = lambda: lib
    app.dependency_overrides[get_search_service] = lambda: search_service
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client(api_app):
    return TestClient(api_app)


@pytest.fixture
def make_service():
    return make_search_service


@pytest.fixture
def sample_volumes():
    return SAMPLE_VOLUMES
