"""
Input validation and sanitisation for user-supplied card data.

Length limits:
  card title   200
  column name   50
  tag name      30
  description 2000
  template prefix 20
"""
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

TAG_RE = re.compile(r"<[^>]*>")
PREFIX_STRIP_RE = re.compile(r"[<>\"']")

MAX_TITLE_LENGTH = 200
MAX_COLUMN_NAME_LENGTH = 50
MAX_TAG_LENGTH = 30
MAX_DESCRIPTION_LENGTH = 2000
MAX_PREFIX_LENGTH = 20


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None

    def to_dict(self):
        data = {"valid": self.valid}
        if self.error:
            data["error"] = self.error
        return data


_OK = ValidationResult(True)


class InputValidator:
    """Sanitisers return cleaned strings; validators return ValidationResult."""

    @staticmethod
    def sanitize_text(text, max_length: int = 1000) -> str:
        """Trim, cap at max_length, strip HTML-like tags."""
        if not text or not isinstance(text, str):
            return ""
        sanitized = text.strip()[:max_length]
        return TAG_RE.sub("", sanitized)

    @staticmethod
    def sanitize_prefix(prefix) -> str:
        """Template prefixes: 20 chars, no angle brackets or quotes."""
        if not prefix or not isinstance(prefix, str):
            return ""
        sanitized = prefix.strip()[:MAX_PREFIX_LENGTH]
        return PREFIX_STRIP_RE.sub("", sanitized)

    @staticmethod
    def sanitize_url(url) -> str:
        """Only http(s) URLs with a host survive; anything else becomes ""."""
        if not url or not isinstance(url, str):
            return ""
        trimmed = url.strip()
        if not trimmed.startswith(("http://", "https://")):
            return ""
        try:
            parsed = urlparse(trimmed)
        except ValueError:
            return ""
        if not parsed.netloc:
            return ""
        return trimmed

    @staticmethod
    def _required(value, limit: int, missing: str, too_long: str) -> ValidationResult:
        if not value or not str(value).strip():
            return ValidationResult(False, missing)
        if len(str(value).strip()) > limit:
            return ValidationResult(False, too_long)
        return _OK

    @classmethod
    def validate_card_title(cls, title) -> ValidationResult:
        return cls._required(
            title, MAX_TITLE_LENGTH,
            "Title is required",
            f"Title must be at most {MAX_TITLE_LENGTH} characters",
        )

    @classmethod
    def validate_column_name(cls, name) -> ValidationResult:
        return cls._required(
            name, MAX_COLUMN_NAME_LENGTH,
            "Column name is required",
            f"Column name must be at most {MAX_COLUMN_NAME_LENGTH} characters",
        )

    @classmethod
    def validate_tag_name(cls, tag) -> ValidationResult:
        return cls._required(
            tag, MAX_TAG_LENGTH,
            "Tag name is required",
            f"Tag name must be at most {MAX_TAG_LENGTH} characters",
        )

    @staticmethod
    def validate_description(description, max_length: int = MAX_DESCRIPTION_LENGTH) -> ValidationResult:
        """Optional, but capped."""
        if description and len(description) > max_length:
            return ValidationResult(
                False, f"Description must be at most {max_length} characters"
            )
        return _OK
