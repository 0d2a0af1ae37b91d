from typing import Optional, Dict, Any


class NewsdeskError(Exception):
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class ValidationError(NewsdeskError):
    pass


class InvalidPageError(ValidationError):
    def __init__(self, page: int, total_pages: int):
        super().__init__(
            message=f"Page {page} is outside 1..{total_pages}",
            error_code="INVALID_PAGE",
            details={"page": page, "total_pages": total_pages}
        )


class FeedNotFoundError(NewsdeskError):
    def __init__(self, feed_id: str):
        super().__init__(
            message=f"Feed {feed_id} not found",
            error_code="FEED_NOT_FOUND",
            details={"feed_id": feed_id}
        )


class FeedError(NewsdeskError):
    """Base class for failures of a single page fetch."""


class NetworkError(FeedError):
    pass


class UpstreamError(FeedError):
    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        details = dict(details or {})
        if status_code is not None:
            details.setdefault("status_code", status_code)
        super().__init__(message, details=details)


class EmptyResultError(FeedError):
    def __init__(self, message: str = "No articles found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)
