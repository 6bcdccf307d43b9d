"""
Navigation and clipboard sinks used by the page controllers.
"""

from typing import List, Optional
from urllib.parse import urljoin


class Navigator:
    """Records route changes; the rendering layer follows ``current``."""

    def __init__(self, origin: str = "http://localhost:3000", initial: str = "/"):
        self.origin = origin.rstrip("/")
        self.history: List[str] = [initial]

    @property
    def current(self) -> str:
        return self.history[-1]

    def push(self, path: str) -> None:
        self.history.append(path)

    def url(self, path: Optional[str] = None) -> str:
        """Absolute URL for ``path`` (default: the current route)."""
        return urljoin(self.origin + "/", (path or self.current).lstrip("/"))


class Clipboard:
    def __init__(self):
        self.text: Optional[str] = None

    def write_text(self, text: str) -> None:
        self.text = text
