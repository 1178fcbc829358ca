"""Validation utilities for document uploads and metadata edits

Validators return (is_valid, error_message) tuples; the service layer turns a
failed check into DocumentValidationError before anything is stored.
"""

import os
import re
from typing import Iterable, Optional, Tuple


# File size limit (default 100MB)
MAX_FILE_SIZE = 100 * 1024 * 1024

MAX_TITLE_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 2000
MAX_TAGS = 10
MAX_TAG_LENGTH = 50


def validate_file_size(size_bytes: int, max_size: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    """Validate file size is within limits

    Args:
        size_bytes: File size in bytes
        max_size: Maximum allowed size (defaults to MAX_FILE_SIZE)

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_file_size(1024)
        (True, None)
        >>> validate_file_size(0)
        (False, 'File is empty (0 bytes)')
    """
    if max_size is None:
        max_size = MAX_FILE_SIZE

    if size_bytes == 0:
        return False, "File is empty (0 bytes)"

    if size_bytes > max_size:
        max_mb = max_size // (1024 * 1024)
        return False, f"The file size must not exceed {max_mb}MB (got {size_bytes} bytes)"

    return True, None


def validate_filename(filename: str) -> Tuple[bool, Optional[str]]:
    """Validate an uploaded file's original name

    Validation rules:
    - Not empty
    - Max 255 characters
    - No path traversal (../, ..\\) or directory separators
    - No null bytes or control characters

    Example:
        >>> validate_filename('notes.md')
        (True, None)
        >>> validate_filename('../../etc/passwd')
        (False, 'Filename contains path traversal or directory separators')
    """
    if not filename or len(filename.strip()) == 0:
        return False, "Filename cannot be empty"

    if len(filename) > 255:
        return False, f"Filename exceeds 255 characters (got {len(filename)})"

    if '..' in filename or '/' in filename or '\\' in filename:
        return False, "Filename contains path traversal or directory separators"

    if '\x00' in filename:
        return False, "Filename contains null bytes"

    if any(ord(c) < 32 for c in filename):
        return False, "Filename contains control characters"

    return True, None


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for use in a Content-Disposition header

    Example:
        >>> sanitize_filename('../../report.pdf')
        'report.pdf'
        >>> sanitize_filename('q3 "final".pdf')
        'q3__final_.pdf'
    """
    filename = os.path.basename(filename.replace('\\', '/'))
    filename = re.sub(r'["\r\n;]', '_', filename)
    filename = filename.replace(' ', '_')
    return filename or "download"


def validate_title(title: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate a document title (nullable, max 255 characters)"""
    if title is not None and len(title) > MAX_TITLE_LENGTH:
        return False, f"The title must not exceed {MAX_TITLE_LENGTH} characters."
    return True, None


def validate_description(description: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate a document description (nullable, max 2000 characters)"""
    if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
        return False, f"The description must not exceed {MAX_DESCRIPTION_LENGTH} characters."
    return True, None


def validate_tags(tags: Optional[Iterable[str]]) -> Tuple[bool, Optional[str]]:
    """Validate a tag list

    Rules:
    - At most 10 tags
    - Each tag is a string of at most 50 characters

    Example:
        >>> validate_tags(['invoice', 'q3'])
        (True, None)
        >>> validate_tags(['x' * 51])
        (False, 'Each tag must not exceed 50 characters.')
    """
    if tags is None:
        return True, None

    tags = list(tags)
    if len(tags) > MAX_TAGS:
        return False, f"You can add up to {MAX_TAGS} tags."

    for tag in tags:
        if not isinstance(tag, str):
            return False, "Each tag must be a string."
        if len(tag) > MAX_TAG_LENGTH:
            return False, f"Each tag must not exceed {MAX_TAG_LENGTH} characters."

    return True, None
