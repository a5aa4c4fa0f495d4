"""Query AST and result models for the dataview query engine"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


class QueryError(ValueError):
    """Raised for queries the engine cannot interpret at all."""


class QueryType(str, Enum):
    table            = "TABLE"
    table_without_id = "TABLE WITHOUT ID"
    list             = "LIST"


class WhereOp(str, Enum):
    eq = "="
    ne = "!="


class SortDirection(str, Enum):
    asc  = "ASC"
    desc = "DESC"


@dataclass(frozen=True)
class FieldSpec:
    name:   str
    header: str


@dataclass(frozen=True)
class Source:
    kind:  Literal["tag", "folder"]
    value: str


@dataclass(frozen=True)
class WhereClause:
    field:  str
    op:     WhereOp
    value:  str | int | float
    quoted: bool = False        # quoted values compare as strings


@dataclass(frozen=True)
class SortClause:
    field:     str
    direction: SortDirection = SortDirection.asc


@dataclass
class QueryAST:
    """One parsed query; built per query string and discarded after evaluation."""
    query_type:    QueryType
    fields:        list[FieldSpec] = field(default_factory=list)
    source:        Source | None = None
    where:         list[WhereClause] = field(default_factory=list)
    sort:          list[SortClause] = field(default_factory=list)
    limit:         int | None = None
    match_nothing: bool = False     # set when a clause could not be understood
    ignored:       list[str] = field(default_factory=list)


class DocumentLink(BaseModel):
    title: str
    slug:  str


class TableRow(BaseModel):
    link:   DocumentLink
    values: list[Any] = Field(default_factory=list)


class TableResult(BaseModel):
    """Rendering-ready table: headers include 'File' unless the query is WITHOUT ID."""
    headers:  list[str]
    rows:     list[TableRow] = Field(default_factory=list)
    with_id:  bool = True


class ListResult(BaseModel):
    items: list[str] = Field(default_factory=list)
    links: list[DocumentLink] = Field(default_factory=list)
