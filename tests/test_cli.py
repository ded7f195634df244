import json

import httpx
import pytest
from typer.testing import CliRunner

from reading_list.api import get_search_service
from reading_list.client.api_client import BooksAPIClient
from reading_list.main import app
from reading_list.ui_helpers import OUTPUT_MODE_ENV

runner = CliRunner()


@pytest.fixture(autouse=True)
def backend(api_app, monkeypatch):
    monkeypatch.delenv(OUTPUT_MODE_ENV, raising=False)
    monkeypatch.setattr(
        "reading_list.main.make_api_client",
        lambda: BooksAPIClient("http://testserver", transport=httpx.ASGITransport(app=api_app)),
    )
    return api_app


def test_list_empty(lib):
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "Want to Read (0)" in result.stdout
    assert "No books in this category yet." in result.stdout


def test_list_groups_by_status(lib):
    lib.add_book("Dune", "Reading", author="Frank Herbert")
    lib.add_book("Emma", "Finished", notes="Re-read")

    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "Reading (1)" in result.stdout
    assert "Dune by Frank Herbert" in result.stdout
    assert "Emma by Unknown Author - Re-read" in result.stdout


def test_list_shows_cover_url(lib):
    lib.add_book("Dune", "Reading", cover_image_url="http://img/dune.jpg")

    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "Cover: http://img/dune.jpg" in result.stdout


def test_list_json_single_status(lib):
    lib.add_book("Dune", "Reading")
    lib.add_book("Emma", "Finished")

    result = runner.invoke(app, ["--output", "json", "list", "--status", "Finished"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert list(payload) == ["Finished"]
    assert payload["Finished"][0]["title"] == "Emma"


def test_list_rejects_unknown_status():
    result = runner.invoke(app, ["list", "--status", "Someday"])
    assert result.exit_code != 0


def test_add_book(lib):
    result = runner.invoke(app, ["add", "Dune", "--author", "Frank Herbert", "--status", "Reading"])
    assert result.exit_code == 0
    assert "Book added successfully!" in result.stdout
    book = lib.list_books()[0]
    assert (book.title, book.author, book.status) == ("Dune", "Frank Herbert", "Reading")


def test_add_book_without_title_fails(lib):
    result = runner.invoke(app, ["add"])
    assert result.exit_code == 1
    assert "Error: Failed to add book: Title and Status are required." in result.stdout
    assert lib.list_books() == []


def test_add_from_search(lib):
    result = runner.invoke(app, ["add", "--search", "dune", "--notes", "From the catalog"])
    assert result.exit_code == 0
    book = lib.list_books()[0]
    assert book.title == "Dune"
    assert book.author == "Frank Herbert"
    assert book.cover_image_url == "http://img/dune.jpg"
    assert book.notes == "From the catalog"


def test_add_from_search_pick_out_of_range(lib):
    result = runner.invoke(app, ["add", "--search", "dune", "--pick", "9"])
    assert result.exit_code == 1
    assert "No search result #9" in result.stdout
    assert lib.list_books() == []


def test_search(lib):
    result = runner.invoke(app, ["search", "dune"])
    assert result.exit_code == 0
    assert "1. Dune by Frank Herbert" in result.stdout
    assert "   Cover: http://img/dune.jpg" in result.stdout
    assert "   Desert planet." in result.stdout
    assert "   No description available." in result.stdout


def test_search_without_key(backend, make_service):
    backend.dependency_overrides[get_search_service] = lambda: make_service(api_key="")
    result = runner.invoke(app, ["search", "dune"])
    assert result.exit_code == 1
    assert "not configured" in result.stdout


def test_update_book(lib):
    book = lib.add_book("Dune", "Want to Read")
    result = runner.invoke(app, ["update", str(book.id), "--status", "Finished"])
    assert result.exit_code == 0
    assert "Book updated successfully!" in result.stdout
    assert lib.find_book(book.id).status == "Finished"


def test_update_without_fields(lib):
    book = lib.add_book("Dune", "Want to Read")
    result = runner.invoke(app, ["update", str(book.id)])
    assert result.exit_code == 1
    assert "No fields provided for update." in result.stdout


def test_remove_book(lib):
    book = lib.add_book("Dune", "Reading")
    result = runner.invoke(app, ["remove", str(book.id)])
    assert result.exit_code == 0
    assert "Book deleted successfully!" in result.stdout
    assert lib.list_books() == []

    result = runner.invoke(app, ["remove", str(book.id)])
    assert result.exit_code == 1
    assert "Book not found." in result.stdout


def test_backend_down(monkeypatch):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    monkeypatch.setattr(
        "reading_list.main.make_api_client",
        lambda: BooksAPIClient("http://testserver", transport=httpx.MockTransport(handler)),
    )
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 1
    assert "Failed to load books" in result.stdout
