"""Custom exception classes for the application."""


class SaveCartException(Exception):
    """Base exception for all SaveCart errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(SaveCartException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} with identifier '{identifier}' not found")


class ExtractionError(SaveCartException):
    """Raised when a strategy hits markup it cannot make sense of."""

    def __init__(self, store: str, message: str):
        super().__init__(f"Extraction error for {store}: {message}")


class FetchError(SaveCartException):
    """Raised when a page cannot be downloaded."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Failed to fetch {url}: {message}")


class RateLimitError(SaveCartException):
    """Raised when a storefront answers with HTTP 429."""

    def __init__(self, domain: str):
        super().__init__(f"Rate limit exceeded for {domain}")
