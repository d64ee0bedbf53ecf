"""
SheetBlog Input Validators
==========================

Validation for post source locations. A source is either an http(s) URL
or a local CSV file given as a path or ``file://`` URL.
"""

from pathlib import Path
from urllib.parse import urlparse, urlunparse
from urllib.request import url2pathname

from .exceptions import ValidationError, ErrorCode


class SourceValidator:
    """Post source URL validation and normalization."""

    REMOTE_SCHEMES = {"http", "https"}

    @classmethod
    def is_remote(cls, url: str) -> bool:
        """True for http(s) sources."""
        return urlparse(url.strip()).scheme.lower() in cls.REMOTE_SCHEMES

    @classmethod
    def validate_source_url(cls, url: str) -> str:
        """Validate and normalize a post source location.

        Args:
            url: Remote URL, ``file://`` URL or filesystem path

        Returns:
            Normalized location

        Raises:
            ValidationError: If the location is unusable
        """
        if not url or not isinstance(url, str):
            raise ValidationError(
                "Source URL is required and must be a string",
                error_code=ErrorCode.VALIDATION_REQUIRED_FIELD,
                field_name="url",
            )

        url = url.strip()
        parsed = urlparse(url)
        scheme = parsed.scheme.lower()

        if scheme in cls.REMOTE_SCHEMES:
            if not parsed.netloc:
                raise ValidationError(
                    "Source URL must include a hostname",
                    field_name="url",
                )
            return urlunparse(parsed._replace(
                scheme=scheme,
                netloc=parsed.netloc.lower(),
                path=parsed.path or "/",
                fragment="",
            ))

        # Single-letter schemes are Windows drive letters, not URL schemes
        if scheme in ("", "file") or len(scheme) == 1:
            return url

        raise ValidationError(
            f"Unsupported source scheme '{scheme}'",
            field_name="url",
        )

    @classmethod
    def local_path(cls, url: str) -> Path:
        """Resolve a local source location to a filesystem path."""
        parsed = urlparse(url.strip())
        if parsed.scheme.lower() == "file":
            return Path(url2pathname(parsed.path))
        return Path(url.strip())


def validate_url(url: str) -> bool:
    """Quick check that a source location is usable."""
    try:
        SourceValidator.validate_source_url(url)
        return True
    except ValidationError:
        return False
