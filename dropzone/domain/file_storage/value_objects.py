"""
File Storage Value Objects

Immutable value objects for type safety and validation.
"""

import re
from dataclasses import dataclass
from datetime import timedelta

from ..errors import InvalidKeywordError, InvalidFileNameError

# Fixed retention for every shared file
FILE_TTL = timedelta(hours=24)

# Per-file upload cap (10 MiB)
MAX_FILE_SIZE = 10 * 1024 * 1024

DEFAULT_DOWNLOAD_URL_TTL_MINUTES = 15

KEYWORD_MIN_LENGTH = 3
KEYWORD_MAX_LENGTH = 50
FILE_NAME_MAX_LENGTH = 255

_KEYWORD_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{3,50}$")


@dataclass(frozen=True)
class Keyword:
    """
    Value object representing a normalized sharing keyword.

    Keywords are trimmed and lowercased on construction, so "Proj-1" and
    "proj-1" address the same files. After normalization the keyword must be
    3-50 characters of letters, digits, underscores or hyphens.
    """

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise InvalidKeywordError("Keyword must be a string")

        normalized = self.value.strip().lower()
        # Frozen dataclass: bypass __setattr__ to store the normalized form
        object.__setattr__(self, "value", normalized)

        if not normalized:
            raise InvalidKeywordError("Keyword is required")

        if not KEYWORD_MIN_LENGTH <= len(normalized) <= KEYWORD_MAX_LENGTH:
            raise InvalidKeywordError(
                f"Keyword must be between {KEYWORD_MIN_LENGTH} and "
                f"{KEYWORD_MAX_LENGTH} characters, got {len(normalized)}"
            )

        if not _KEYWORD_PATTERN.match(normalized):
            raise InvalidKeywordError(
                "Invalid keyword format. Use letters, numbers, underscores, "
                "and hyphens only."
            )

    @property
    def blob_prefix(self) -> str:
        """Blob store prefix holding every file of this keyword."""
        return f"{self.value}/"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FileName:
    """
    Value object representing a file name usable as a blob path segment.

    Surrounding whitespace is stripped. Empty names, names over 255
    characters, relative path markers and names containing separators or
    NUL bytes are rejected.
    """

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise InvalidFileNameError("File name must be a string")

        normalized = self.value.strip()
        object.__setattr__(self, "value", normalized)

        if not normalized:
            raise InvalidFileNameError("File name is required")

        if len(normalized) > FILE_NAME_MAX_LENGTH:
            raise InvalidFileNameError(
                f"File name must be at most {FILE_NAME_MAX_LENGTH} characters"
            )

        if normalized in (".", ".."):
            raise InvalidFileNameError(f"Invalid file name: {normalized}")

        if any(c in normalized for c in ("/", "\\", "\x00")):
            raise InvalidFileNameError(
                f"File name cannot contain path separators: {normalized}"
            )

    def __str__(self) -> str:
        return self.value


def blob_path(keyword: Keyword, file_name: FileName) -> str:
    """Blob store path for a file: ``keyword/file_name``."""
    return f"{keyword.value}/{file_name.value}"
