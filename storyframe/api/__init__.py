"""Storyframe HTTP API."""


def start_server(host: str = None, port: int = None, reload: bool = None):
    """Start the FastAPI server (imports the app lazily)."""
    from .main import start_server as _start_server
    _start_server(host=host, port=port, reload=reload)


__all__ = ["start_server"]
