"""
Failures that abort parsing of a single document.

Heuristic misses downstream of extraction are never exceptions: a field that
cannot be resolved is simply absent from the output record.
"""


class ParsingError(Exception):
    """Base class for request-fatal document errors."""


class UnsupportedFormat(ParsingError):
    """The upload's extension / content type is not one we can decode."""

    def __init__(self, filename: str = "", content_type: str = ""):
        self.filename = filename
        self.content_type = content_type
        super().__init__(
            f"Unsupported document format (filename={filename!r}, content_type={content_type!r})"
        )


class CorruptDocument(ParsingError):
    """The decoder rejected the byte stream."""

    def __init__(self, fmt: str, reason: str = ""):
        self.format = fmt
        self.reason = reason
        message = f"Could not decode {fmt} document"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NoExtractableText(ParsingError):
    """A PDF without a usable text layer and no OCR provider to recover it."""

    def __init__(self, fmt: str = "pdf"):
        self.format = fmt
        super().__init__(f"{fmt} document has no extractable text and OCR is not available")
