"""Pydantic input models for source document operations.

This module defines input models for whole-source operations:
- List the notes of a source
- Save source metadata (title, author, type, link, date, tags)
- Archive or unarchive a source
- Create a new source
- Capture a podcast bookmark into a source
- Save post frontmatter (title, description, date, draft, ...)
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from .base import BaseSourceInput

SourceType = Literal["book", "article", "paper", "podcast"]
PostCategory = Literal["work", "not-work"]


class ListSourceNotesInput(BaseSourceInput):
    """Input model for list_source_notes tool.

    Examples:
        >>> ListSourceNotesInput(slug="deep-work-cal-newport")
    """

    # Inherits slug from BaseSourceInput


class UpdateSourceMetadataInput(BaseSourceInput):
    """Input model for update_source_metadata tool.

    Only fields that are provided are changed. Providing ``tags`` sets the
    aggregate tag list directly; it is recomputed again on the next note tag edit.
    """

    title: Optional[str] = Field(None, description="Source title.")
    author: Optional[str] = Field(None, description="Author, host or publisher.")
    type: Optional[SourceType] = Field(None, description="One of book, article, paper, podcast.")
    link: Optional[str] = Field(None, description="Canonical URL of the source.")
    date: Optional[datetime] = Field(None, description="Date the source was added (ISO-8601).")
    tags: Optional[list[str]] = Field(None, description="Source-level tags.")

    @model_validator(mode="after")
    def validate_has_updates(self) -> "UpdateSourceMetadataInput":
        """Require at least one field to update."""
        if not self.updates():
            raise ValueError(
                "Provide at least one of title, author, type, link, date or tags to update."
            )
        return self

    def updates(self) -> dict:
        """Return only the metadata fields that were supplied."""
        return {
            key: value
            for key, value in self.model_dump(exclude={"slug"}).items()
            if value is not None
        }


class SetSourceArchivedInput(BaseSourceInput):
    """Input model for set_source_archived tool."""

    archived: bool = Field(description="True to archive the source, False to restore it.")


class CreateSourceInput(BaseModel):
    """Input model for create_source tool.

    The slug is derived from title and author.

    Examples:
        >>> CreateSourceInput(title="Deep Work", author="Cal Newport", type="book")
    """

    title: str = Field(min_length=1, description="Source title.")
    author: str = Field(min_length=1, description="Author, host or publisher.")
    type: SourceType = Field("book", description="One of book, article, paper, podcast.")
    link: Optional[str] = Field(None, description="Canonical URL of the source.")

    @field_validator('title', 'author')
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Strip whitespace and reject blank values."""
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("Title and author cannot be empty.")
        return cleaned


class CaptureBookmarkInput(BaseModel):
    """Input model for capture_bookmark tool.

    Records a moment in a podcast episode as a note on that episode's source,
    creating the source the first time the episode is bookmarked.
    """

    episode_title: str = Field(min_length=1, description="Episode name.")
    show_name: str = Field(min_length=1, description="Show name (used in the slug).")
    publisher: str = Field(min_length=1, description="Show publisher (used as the author).")
    link: str = Field(min_length=1, description="Deep link to the episode at the bookmarked offset.")
    note: Optional[str] = Field(None, description="Optional note text.")
    progress_ms: Optional[int] = Field(
        None,
        ge=0,
        description="Playback offset in milliseconds; used for the default note text."
    )


class UpdatePostMetadataInput(BaseSourceInput):
    """Input model for update_post_metadata tool.

    ``slug`` names the post. Only fields that are provided are changed.

    Examples:
        >>> UpdatePostMetadataInput(slug="on-writing-every-day", draft=False)
    """

    title: Optional[str] = Field(None, description="Post title.")
    description: Optional[str] = Field(None, description="One-line summary shown in listings.")
    date: Optional[datetime] = Field(None, description="Publication date (ISO-8601).")
    draft: Optional[bool] = Field(None, description="False publishes the post, True hides it.")
    tags: Optional[list[str]] = Field(None, description="Post tags.")
    category: Optional[PostCategory] = Field(None, description="Either 'work' or 'not-work'.")
    feature_image: Optional[str] = Field(
        None,
        alias="featureImage",
        description="Path of the post's feature image."
    )

    @model_validator(mode="after")
    def validate_has_updates(self) -> "UpdatePostMetadataInput":
        """Require at least one field to update."""
        if not self.updates():
            raise ValueError(
                "Provide at least one of title, description, date, draft, tags, category or featureImage."
            )
        return self

    def updates(self) -> dict:
        """Return only the frontmatter fields that were supplied, keyed by frontmatter name."""
        return {
            key: value
            for key, value in self.model_dump(exclude={"slug"}, by_alias=True).items()
            if value is not None
        }
