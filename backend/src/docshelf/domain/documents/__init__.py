"""Documents domain module - visibility, sensitivity, validation, blob storage port"""

from .visibility import Visibility, generate_public_token, public_path, PUBLIC_TOKEN_LENGTH
from .sensitivity import Sensitivity, normalize_sensitivity, is_sensitive, DEFAULT_SENSITIVITY
from .validation import (
    validate_file_size,
    validate_filename,
    sanitize_filename,
    validate_title,
    validate_description,
    validate_tags,
    MAX_FILE_SIZE,
    MAX_TAGS,
    MAX_TAG_LENGTH,
)

__all__ = [
    "Visibility",
    "generate_public_token",
    "public_path",
    "PUBLIC_TOKEN_LENGTH",
    "Sensitivity",
    "normalize_sensitivity",
    "is_sensitive",
    "DEFAULT_SENSITIVITY",
    "validate_file_size",
    "validate_filename",
    "sanitize_filename",
    "validate_title",
    "validate_description",
    "validate_tags",
    "MAX_FILE_SIZE",
    "MAX_TAGS",
    "MAX_TAG_LENGTH",
]
