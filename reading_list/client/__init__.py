"""Reading List - Client Package

Client-side state container and view controller that talk to the backend
over HTTP/JSON.
"""
