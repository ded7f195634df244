"""Reading List - Core Application Package

This package contains the core application modules including:
- API endpoints (api.py)
- Book store logic (library.py)
- CLI interface (main.py)
- Data models (book.py)
- Database layer (database.py)
- Client view controller (client/)
"""

__version__ = "1.0.0"
