import asyncio
import logging
from typing import Optional

import typer

from reading_list.book import BookStatus, BookUpdate
from reading_list.client.api_client import BooksAPIClient
from reading_list.client.controller import ViewController
from reading_list.client.state import ViewMode
from reading_list.config import settings
from reading_list.ui_helpers import print_board, print_message, print_search_results, set_output_mode

APP_NAME = "Reading List CLI"

app = typer.Typer(help=APP_NAME)


def make_api_client() -> BooksAPIClient:
    """Client for the backend at READING_LIST_API_URL."""
    return BooksAPIClient(settings.api_base_url)


def _validate_status(value: Optional[str]) -> Optional[str]:
    if value is not None and not BookStatus.is_valid(value):
        raise typer.BadParameter(f"must be one of: {', '.join(BookStatus.values())}")
    return value


def _run(action) -> bool:
    """Mount a controller, run ``action`` against it and print the banner."""
    async def runner() -> bool:
        async with make_api_client() as api:
            controller = ViewController(api)
            await controller.mount()
            message = controller.current_message()
            if message is not None and message.is_error:
                print_message(message)
                return False
            ok = await action(controller)
            print_message(controller.current_message())
            return ok

    return asyncio.run(runner())


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level"),
):
    """Global CLI options (output mode, logging)."""
    logging.basicConfig(level=log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # httpx logs request URLs at INFO, and the search URL carries the API key
    logging.getLogger("httpx").setLevel(logging.WARNING)
    if output:
        set_output_mode(output)


@app.command("serve")
def cli_serve(
    host: str = typer.Option(settings.api_host, help="Bind address"),
    port: int = typer.Option(settings.api_port, help="Port to listen on"),
):
    """Run the backend API server."""
    import uvicorn

    print(f"Backend server running on http://{host}:{port}")
    uvicorn.run("reading_list.api:app", host=host, port=port, log_level=settings.log_level.lower())


@app.command("list")
def cli_list(status: Optional[str] = typer.Option(None, "--status", "-s", callback=_validate_status,
                                                   help="Only show one status")):
    """Show the reading list grouped by status."""
    async def action(controller: ViewController) -> bool:
        buckets = controller.categorized()
        if status:
            buckets = {status: buckets[status]}
        print_board(buckets)
        return True

    if not _run(action):
        raise typer.Exit(code=1)


@app.command("search")
def cli_search(query: str):
    """Search the external catalog."""
    async def action(controller: ViewController) -> bool:
        controller.set_view(ViewMode.ADD)
        results = await controller.search(query)
        if controller.state.message is not None and controller.state.message.is_error:
            return False
        print_search_results(results)
        return True

    if not _run(action):
        raise typer.Exit(code=1)


@app.command("add")
def cli_add(
    title: Optional[str] = typer.Argument(None, help="Book title (optional with --search)"),
    author: Optional[str] = typer.Option(None, "--author", "-a"),
    status: str = typer.Option(BookStatus.WANT_TO_READ.value, "--status", "-s", callback=_validate_status),
    notes: Optional[str] = typer.Option(None, "--notes", "-n"),
    cover: Optional[str] = typer.Option(None, "--cover", help="Cover image URL"),
    search: Optional[str] = typer.Option(None, "--search", help="Pre-fill from a catalog search"),
    pick: int = typer.Option(1, "--pick", min=1, help="Which search result to use (1-based)"),
):
    """Add a book, optionally pre-filled from a catalog search."""
    async def action(controller: ViewController) -> bool:
        controller.set_view(ViewMode.ADD)
        if search:
            results = await controller.search(search)
            if controller.state.message is not None and controller.state.message.is_error:
                return False
            if len(results) < pick:
                print(f"No search result #{pick} for '{search}'.")
                return False
            controller.select_search_result(pick - 1)

        fields = {"status": status}
        if title is not None:
            fields["title"] = title
        if author is not None:
            fields["author"] = author
        if notes is not None:
            fields["notes"] = notes
        if cover is not None:
            fields["cover_image_url"] = cover
        controller.update_form(**fields)

        book = await controller.add_book()
        if book is None:
            return False
        print(f"#{book.id} {book.title} by {book.author or 'Unknown Author'} [{book.status}]")
        return True

    if not _run(action):
        raise typer.Exit(code=1)


@app.command("update")
def cli_update(
    book_id: int = typer.Argument(..., help="Book id"),
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    author: Optional[str] = typer.Option(None, "--author", "-a"),
    status: Optional[str] = typer.Option(None, "--status", "-s", callback=_validate_status),
    notes: Optional[str] = typer.Option(None, "--notes", "-n"),
    cover: Optional[str] = typer.Option(None, "--cover", help="Cover image URL"),
):
    """Update some fields of a book."""
    fields = {"title": title, "author": author, "status": status, "notes": notes, "coverImageUrl": cover}
    update = BookUpdate(**{k: v for k, v in fields.items() if v is not None})

    async def action(controller: ViewController) -> bool:
        return await controller.update_book(book_id, update)

    if not _run(action):
        raise typer.Exit(code=1)


@app.command("remove")
def cli_remove(book_id: int = typer.Argument(..., help="Book id")):
    """Delete a book."""
    async def action(controller: ViewController) -> bool:
        return await controller.delete_book(book_id)

    if not _run(action):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
