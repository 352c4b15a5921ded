"""briefly: asynchronous summarization jobs for text and URLs."""
from briefly.main import create_app

__all__ = ["create_app"]
