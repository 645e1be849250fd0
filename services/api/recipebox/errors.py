"""Typed failures raised by the extraction pipeline.

Every network or validation problem surfaces as a subclass of
``ExtractionError``. The orchestrator turns them into a ``ParseResult``
so callers always get one descriptive message instead of a traceback.
"""


class ExtractionError(Exception):
    code = "extraction_error"
    default_message = "Could not extract a recipe from this URL."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidUrl(ExtractionError):
    code = "invalid_url"
    default_message = "Invalid URL. Only http and https URLs are allowed."


class FetchTimeout(ExtractionError):
    code = "fetch_timeout"
    default_message = "Request timed out."


class FetchFailed(ExtractionError):
    code = "fetch_failed"
    default_message = "Could not fetch URL."


class InstagramAcquisitionFailed(FetchFailed):
    code = "instagram_failed"
    default_message = "Could not extract caption from Instagram post."


class UnsupportedContentType(ExtractionError):
    code = "unsupported_content_type"
    default_message = "URL does not appear to be an HTML page."


class ResponseTooLarge(ExtractionError):
    code = "response_too_large"
    default_message = "Page content is too large."


class NoContentFound(ExtractionError):
    code = "no_content"
    default_message = "No recipe content found on this page."


class MalformedStructuredData(ExtractionError):
    """Raised for a single unparsable JSON-LD block; always recovered locally."""

    code = "malformed_structured_data"
    default_message = "Malformed structured data block."
