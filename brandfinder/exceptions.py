"""Exceptions raised by brandfinder."""


class BrandFinderError(Exception):
    """Base class for errors surfaced to callers."""


class SearchCancelled(BrandFinderError):
    """A search run was cancelled before it finished."""

    def __init__(self, message: str = "Search cancelled", checked: int = 0):
        super().__init__(message)
        self.checked = checked
