"""Core note, frontmatter and persistence operations."""
