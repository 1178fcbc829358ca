"""Pydantic schema for classifier output validation.

The classifier payload is untrusted JSON. AnalysisResult is the single typed
record the rest of the system sees: missing fields default to None/[]/SAFE,
tags are trimmed and capped at five, sensitivity is normalized.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...domain.documents.sensitivity import Sensitivity, normalize_sensitivity

MAX_SUGGESTED_TAGS = 5
MAX_SUGGESTED_TITLE_LENGTH = 255


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


class AnalysisResult(BaseModel):
    """Normalized classification result."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    title: str | None = None
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    summary: str | None = None
    sensitivity: Sensitivity = Sensitivity.SAFE

    @field_validator("title", mode="before")
    @classmethod
    def clean_title(cls, v: Any) -> str | None:
        """Trim and cap the title at the column limit."""
        v = _clean_text(v)
        return v[:MAX_SUGGESTED_TITLE_LENGTH] if v else None

    @field_validator("description", "summary", mode="before")
    @classmethod
    def clean_text(cls, v: Any) -> str | None:
        return _clean_text(v)

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v: Any) -> list[str]:
        """Accept a list or comma separated string; drop blanks and duplicates; keep five."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, (list, tuple)):
            return []

        tags: list[str] = []
        for item in v:
            tag = _clean_text(item)
            if tag:
                tag = tag[:50]
                if tag not in tags:
                    tags.append(tag)
        return tags[:MAX_SUGGESTED_TAGS]

    @field_validator("sensitivity", mode="before")
    @classmethod
    def clean_sensitivity(cls, v: Any) -> Sensitivity:
        return normalize_sensitivity(v)
