"""Data models shared by the loader, the renderers, and the query engine"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class FileInfo(BaseModel):
    """Lookup entry for one vault file, keyed by lowercased filename stem."""
    slug: str
    title: str
    path: str


class DocumentRecord(BaseModel):
    """Read-only view of one document as seen by the query engine."""
    path: str                       # vault-relative, forward slashes
    slug: str
    title: str
    tags: list[str] = Field(default_factory=list)           # without leading '#'
    fields: dict[str, Any] = Field(default_factory=dict)    # frontmatter


@dataclass
class ParsedDoc:
    """Internal parse result for a single source file; not persisted."""
    path:        Path
    rel_path:    str            # vault-relative, forward slashes
    slug:        str
    title:       str
    markdown:    str            # body only (frontmatter stripped)
    frontmatter: dict[str, Any]


@dataclass(frozen=True)
class RenderContext:
    """Immutable inputs threaded through one render: link lookup and query collection."""
    file_lookup: Mapping[str, FileInfo] = field(default_factory=dict)
    documents:   tuple[DocumentRecord, ...] = ()
