"""Evaluate a parsed query against an in-memory document collection

Filtering applies FROM, then every WHERE clause (implicit AND). Sorting is
stable with the first SORT clause taking priority; missing values sort last
in either direction, numbers before strings, strings case-insensitively.
"""

import logging
from collections.abc import Iterable
from datetime import date
from pathlib import PurePosixPath
from typing import Any

from ivpub.core.models import DocumentRecord
from ivpub.dataview.models import (
    DocumentLink,
    ListResult,
    QueryAST,
    QueryType,
    SortClause,
    SortDirection,
    Source,
    TableResult,
    TableRow,
    WhereClause,
    WhereOp,
)
from ivpub.dataview.parse import parse_query


log = logging.getLogger(__name__)

MISSING = object()
ID_HEADER = "File"


def _file_field(doc: DocumentRecord, name: str) -> Any:
    path = PurePosixPath(doc.path)
    builtins = {
        "name":   path.stem,
        "path":   doc.path,
        "folder": "" if str(path.parent) == "." else str(path.parent),
        "link":   doc.slug,
        "tags":   ["#" + t for t in doc.tags],
    }
    return builtins.get(name, MISSING)


def field_value(doc: DocumentRecord, name: str) -> Any:
    """Frontmatter value (exact key, then case-insensitive), a file.* builtin, or MISSING."""
    lowered = name.lower()
    if lowered.startswith("file."):
        return _file_field(doc, lowered[len("file."):])
    if "." in name:
        return MISSING
    if name in doc.fields:
        value = doc.fields[name]
    else:
        value = next((v for k, v in doc.fields.items() if k.lower() == lowered), MISSING)
    return MISSING if value is None else value


def as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ", ".join(as_text(v) for v in value)
    return str(value)


def as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _equals(value: Any, clause: WhereClause) -> bool:
    if isinstance(clause.value, str) or clause.quoted:
        return as_text(value) == str(clause.value)
    number = as_number(value)
    return number is not None and number == float(clause.value)


def matches_where(doc: DocumentRecord, clause: WhereClause) -> bool:
    """Absent fields fail '=' and pass '!='; list fields match '=' on any element."""
    value = field_value(doc, clause.field)
    if value is MISSING:
        return clause.op is WhereOp.ne
    candidates = value if isinstance(value, (list, tuple)) else [value]
    hit = any(_equals(v, clause) for v in candidates)
    return hit if clause.op is WhereOp.eq else not hit


def matches_source(doc: DocumentRecord, source: Source | None) -> bool:
    """Tag sources include subtags; folder sources match any path starting with the value."""
    if source is None:
        return True
    if source.kind == "tag":
        wanted = source.value.lstrip("#").lower()
        return any(t.lower() == wanted or t.lower().startswith(wanted + "/") for t in doc.tags)
    return doc.path.startswith(source.value.lstrip("/"))


def _sort_key(value: Any) -> tuple | None:
    if value is MISSING:
        return None
    number = None if isinstance(value, str) else as_number(value)
    if number is not None:
        return (0, number, "")
    return (1, 0.0, as_text(value).lower())


def sort_documents(docs: list[DocumentRecord], clauses: list[SortClause]) -> list[DocumentRecord]:
    """Stable multi-key sort; apply keys right to left so the first clause dominates."""
    docs = list(docs)
    for clause in reversed(clauses):
        desc = clause.direction is SortDirection.desc

        def key(doc: DocumentRecord, clause: SortClause = clause, desc: bool = desc) -> tuple:
            k = _sort_key(field_value(doc, clause.field))
            if k is None:
                return (0,) if desc else (1,)
            return (1, *k) if desc else (0, *k)

        docs.sort(key=key, reverse=desc)
    return docs


def _link(doc: DocumentRecord) -> DocumentLink:
    return DocumentLink(title=doc.title, slug=doc.slug)


def execute_query(ast: QueryAST, documents: Iterable[DocumentRecord]) -> TableResult | ListResult:
    """Filter, sort, limit and project documents for a parsed query."""
    if ast.match_nothing:
        selected: list[DocumentRecord] = []
    else:
        selected = [
            d for d in documents
            if matches_source(d, ast.source) and all(matches_where(d, c) for c in ast.where)
        ]
    selected = sort_documents(selected, ast.sort)
    if ast.limit is not None:
        selected = selected[:ast.limit]
    log.debug("Query %s matched %d document(s)", ast.query_type.value, len(selected))

    if ast.query_type is QueryType.list:
        return ListResult(items=[d.title for d in selected], links=[_link(d) for d in selected])

    with_id = ast.query_type is QueryType.table
    headers = ([ID_HEADER] if with_id else []) + [f.header for f in ast.fields]
    rows = [
        TableRow(
            link=_link(d),
            values=[
                None if (v := field_value(d, f.name)) is MISSING else v
                for f in ast.fields
            ],
        )
        for d in selected
    ]
    return TableResult(headers=headers, rows=rows, with_id=with_id)


def run_query(text: str, documents: Iterable[DocumentRecord]) -> TableResult | ListResult:
    """Parse and execute in one step; QueryError propagates to the caller."""
    return execute_query(parse_query(text), documents)
