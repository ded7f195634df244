import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from reading_list.book import Book, BookUpdate
from reading_list.config import settings
from reading_list.errors import LibraryError, ValidationError
from reading_list.library import Library
from reading_list.services.google_books_service import GoogleBooksService
from reading_list.services.http_client import cleanup_http_client, get_http_client

logger = logging.getLogger(__name__)

_library: Optional[Library] = None


def get_library() -> Library:
    """Dependency returning the process-wide book store."""
    global _library
    if _library is None:
        _library = Library()
    return _library


def get_search_service() -> GoogleBooksService:
    return GoogleBooksService()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.google_books_api_key:
        logger.warning("GOOGLE_BOOKS_API_KEY is not set. Google Books search will not work.")
    await get_http_client()
    try:
        yield
    finally:
        await cleanup_http_client()


app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error handling ---
@app.exception_handler(LibraryError)
async def library_error_handler(request: Request, exc: LibraryError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in errors
    ) or "Invalid request."
    return JSONResponse(status_code=400, content={"error": detail})


# --- Models ---
class BookModel(BaseModel):
    id: int
    title: str
    author: str | None = None
    status: str
    notes: str | None = None
    coverImageUrl: str | None = None


class BookCreateModel(BaseModel):
    title: str | None = None
    author: str | None = None
    status: str | None = None
    notes: str | None = None
    coverImageUrl: str | None = None


class BookUpdateModel(BaseModel):
    """Partial update body; unknown keys are ignored."""
    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    author: str | None = None
    status: str | None = None
    notes: str | None = None
    coverImageUrl: str | None = None

    def to_update(self) -> BookUpdate:
        return BookUpdate.from_dict(self.model_dump(exclude_unset=True))


class MessageModel(BaseModel):
    message: str
    id: int


class SearchResultModel(BaseModel):
    title: str
    author: str
    coverImageUrl: str | None = None
    description: str


class HealthModel(BaseModel):
    status: str
    timestamp: str
    total_books: int
    db: bool
    search_configured: bool = Field(description="Whether GOOGLE_BOOKS_API_KEY is set")


# --- Health check ---
@app.get("/health", response_model=HealthModel)
def health(library: Library = Depends(get_library), search: GoogleBooksService = Depends(get_search_service)):
    """Lightweight health endpoint: database reachability and search configuration."""
    try:
        total = library.count_books()
        db_ok = True
    except LibraryError:
        total = 0
        db_ok = False
    return HealthModel(
        status="healthy" if db_ok else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        total_books=total,
        db=db_ok,
        search_configured=search.is_configured(),
    )


# --- Books ---
@app.get("/books", response_model=List[BookModel])
def get_books(
    status: Optional[str] = Query(None, description="Only return books with this status"),
    library: Library = Depends(get_library),
):
    """Retrieve all books, optionally filtered by status."""
    return [BookModel(**b.to_dict()) for b in library.list_books(status)]


@app.post("/books", response_model=BookModel, status_code=201)
def add_book(payload: BookCreateModel, library: Library = Depends(get_library)):
    """Add a new book to the reading list."""
    book: Book = library.add_book(
        payload.title,
        payload.status,
        author=payload.author,
        notes=payload.notes,
        cover_image_url=payload.coverImageUrl,
    )
    return BookModel(**book.to_dict())


@app.put("/books/{book_id}", response_model=MessageModel)
def update_book(book_id: int, payload: BookUpdateModel, library: Library = Depends(get_library)):
    """Update any subset of a book's fields."""
    library.update_book(book_id, payload.to_update())
    return MessageModel(message="Book updated successfully.", id=book_id)


@app.delete("/books/{book_id}", response_model=MessageModel)
def delete_book(book_id: int, library: Library = Depends(get_library)):
    """Delete a book by id."""
    library.remove_book(book_id)
    return MessageModel(message="Book deleted successfully.", id=book_id)


# --- Search proxy ---
@app.get("/search-books", response_model=List[SearchResultModel])
async def search_books(
    q: Optional[str] = Query(None, description="Search query"),
    search: GoogleBooksService = Depends(get_search_service),
):
    """Proxy a Google Books search so the API key never leaves the server."""
    if not q:
        raise ValidationError("Search query (q) is required.")
    results = await search.search_books(q)
    return [SearchResultModel(**r.to_dict()) for r in results]
