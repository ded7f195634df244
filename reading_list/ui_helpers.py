import json
import os
from typing import Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from reading_list.book import Book
from reading_list.client.state import Message, SearchHit

# Environment variable controlling CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "READING_LIST_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _book_line(book: Book) -> str:
    line = f"#{book.id} {book.title} by {book.author or 'Unknown Author'}"
    if book.notes:
        line += f" - {book.notes}"
    return line


def print_board(buckets: Dict[str, List[Book]]) -> None:
    """Print the status buckets in the current output mode.
    - plain: a heading per status followed by '#id Title by Author' lines,
      each with its cover URL underneath when one is set
    - json: object mapping status to a list of books
    - rich: one table per status
    """
    mode = get_output_mode()

    if mode == "json":
        payload = {status: [b.to_dict() for b in books] for status, books in buckets.items()}
        print(json.dumps(payload, ensure_ascii=False))
        return

    for status, books in buckets.items():
        if mode == "rich":
            table = Table(title=f"{status} ({len(books)})", show_lines=True, header_style="bold cyan")
            table.add_column("ID", style="magenta", no_wrap=True)
            table.add_column("Title", style="white")
            table.add_column("Author", style="white")
            table.add_column("Notes", style="dim")
            table.add_column("Cover", style="blue", overflow="fold")
            for b in books:
                table.add_row(str(b.id), b.title, b.author or "Unknown Author", b.notes or "",
                              b.cover_image_url or "")
            _console.print(table)
        else:
            print(f"{status} ({len(books)})")
            if not books:
                print("  No books in this category yet.")
            for b in books:
                print(f"  {_book_line(b)}")
                if b.cover_image_url:
                    print(f"     Cover: {b.cover_image_url}")


def print_search_results(results: List[SearchHit]) -> None:
    mode = get_output_mode()

    if not results:
        print("No results.")
        return

    if mode == "json":
        payload = [
            {"title": r.title, "author": r.author, "coverImageUrl": r.cover_image_url, "description": r.description}
            for r in results
        ]
        print(json.dumps(payload, ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="Search Results", show_lines=True, header_style="bold cyan")
        table.add_column("#", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Description", style="dim")
        table.add_column("Cover", style="blue", overflow="fold")
        for i, r in enumerate(results, 1):
            table.add_row(str(i), r.title, r.author, r.description, r.cover_image_url or "")
        _console.print(table)
    else:
        for i, r in enumerate(results, 1):
            print(f"{i}. {r.title} by {r.author}")
            if r.cover_image_url:
                print(f"   Cover: {r.cover_image_url}")
            print(f"   {r.description}")


def print_message(message: Optional[Message]) -> None:
    if message is None:
        return
    if get_output_mode() == "rich":
        style = "red" if message.is_error else "green"
        _console.print(Panel.fit(message.text, border_style=style))
    else:
        prefix = "Error: " if message.is_error else ""
        print(f"{prefix}{message.text}")
