"""Exception types shared by services and the HTTP layer.

How they reach clients (see the handlers registered in ``create_app``):

- ``InternalServerError``: logged in full, answered with a generic 500.
  Used when stored data cannot be read back, e.g. a corrupt sitemap tree.
- ``ValueError`` and its subclasses: the message is safe to show and becomes
  the 422 detail. ``InvalidMoveError`` is one of these.
- ``DuplicateUrlError``: answered with 409 and the message as detail.
"""

from __future__ import annotations


class InternalServerError(Exception):
    """Raised for failures whose details must stay server-side."""


class InvalidMoveError(ValueError):
    """Raised when a sitemap move would place a page inside its own subtree."""

    def __init__(self, dragged_id: str, target_id: str) -> None:
        super().__init__(
            f"Cannot move page '{dragged_id}' relative to its own descendant '{target_id}'"
        )
        self.dragged_id = dragged_id
        self.target_id = target_id


class DuplicateUrlError(Exception):
    """Raised when a content page URL already exists for the site."""

    def __init__(self, url: str) -> None:
        super().__init__(f"A page with URL '{url}' already exists for this site")
        self.url = url
