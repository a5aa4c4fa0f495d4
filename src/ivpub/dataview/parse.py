"""Parse TABLE / LIST queries with FROM, WHERE, SORT and LIMIT clauses

Keywords are case-insensitive and newlines count as whitespace. Clauses the
engine does not support are ignored (GROUP BY, FLATTEN, ...) or, where
ignoring them would widen the result (compound WHERE, compound FROM), make
the query match nothing.
"""

import logging
import re
from dataclasses import dataclass

from ivpub.dataview.models import (
    FieldSpec,
    QueryAST,
    QueryError,
    QueryType,
    SortClause,
    SortDirection,
    Source,
    WhereClause,
    WhereOp,
)


log = logging.getLogger(__name__)

CLAUSE_KEYWORDS = {"FROM", "WHERE", "SORT", "LIMIT", "GROUP", "FLATTEN"}

_TOKEN_RE = re.compile(
    r'''
    \s*(?:
        (?P<string>"(?:[^"\\]|\\.)*")
      | (?P<op>!=|<=|>=|=|<|>)
      | (?P<comma>,)
      | (?P<number>-?\d+(?:\.\d+)?)(?![\w.])
      | (?P<word>[^\s,="!<>]+)
    )
    ''',
    re.VERBOSE,
)


@dataclass(frozen=True)
class Token:
    kind: str       # string | op | comma | number | word
    text: str

    def is_keyword(self, *words: str) -> bool:
        return self.kind == "word" and self.text.upper() in words

    @property
    def literal(self) -> str | int | float:
        if self.kind == "string":
            return re.sub(r'\\(.)', r'\1', self.text[1:-1])
        if self.kind == "number":
            return float(self.text) if "." in self.text else int(self.text)
        return self.text


def tokenize(text: str) -> list[Token]:
    return [Token(m.lastgroup, m.group(m.lastgroup)) for m in _TOKEN_RE.finditer(text)]


def _split_commas(tokens: list[Token]) -> list[list[Token]]:
    groups: list[list[Token]] = [[]]
    for tok in tokens:
        if tok.kind == "comma":
            groups.append([])
        else:
            groups[-1].append(tok)
    return [g for g in groups if g]


def _take_clause(tokens: list[Token], pos: int) -> tuple[list[Token], int]:
    """Tokens from pos up to (not including) the next clause keyword."""
    end = pos
    while end < len(tokens) and not tokens[end].is_keyword(*CLAUSE_KEYWORDS):
        end += 1
    return tokens[pos:end], end


def _parse_fields(tokens: list[Token]) -> list[FieldSpec]:
    fields = []
    for group in _split_commas(tokens):
        name = group[0].text
        if len(group) == 3 and group[1].is_keyword("AS"):
            fields.append(FieldSpec(name=name, header=str(group[2].literal)))
        else:
            if len(group) > 1:
                log.warning("Ignoring unsupported field expression: %s", " ".join(t.text for t in group))
            fields.append(FieldSpec(name=name, header=name))
    return fields


def _parse_source(tokens: list[Token], ast: QueryAST) -> None:
    if len(tokens) == 1 and tokens[0].kind == "word" and tokens[0].text.startswith("#"):
        ast.source = Source(kind="tag", value=tokens[0].text[1:])
    elif len(tokens) == 1 and tokens[0].kind == "string":
        ast.source = Source(kind="folder", value=str(tokens[0].literal))
    else:
        log.warning("Unsupported FROM clause: %s", " ".join(t.text for t in tokens))
        ast.match_nothing = True


def _parse_where(tokens: list[Token], ast: QueryAST) -> None:
    if len(tokens) != 3 or tokens[0].kind != "word" or tokens[1].text not in ("=", "!="):
        log.warning("Unsupported WHERE clause: %s", " ".join(t.text for t in tokens))
        ast.match_nothing = True
        return
    value = tokens[2]
    ast.where.append(WhereClause(
        field=tokens[0].text,
        op=WhereOp(tokens[1].text),
        value=value.literal,
        quoted=value.kind == "string",
    ))


def _parse_sort(tokens: list[Token], ast: QueryAST) -> None:
    for group in _split_commas(tokens):
        if len(group) == 1:
            ast.sort.append(SortClause(field=group[0].text))
        elif len(group) == 2 and group[1].is_keyword("ASC", "DESC"):
            ast.sort.append(SortClause(field=group[0].text, direction=SortDirection(group[1].text.upper())))
        else:
            log.warning("Ignoring unsupported SORT expression: %s", " ".join(t.text for t in group))


def _parse_limit(tokens: list[Token], ast: QueryAST) -> None:
    if len(tokens) == 1 and tokens[0].kind == "number" and isinstance(tokens[0].literal, int):
        ast.limit = max(0, tokens[0].literal)
    else:
        log.warning("Ignoring unsupported LIMIT clause: %s", " ".join(t.text for t in tokens))


def parse_query(text: str) -> QueryAST:
    """Parse a query string; raises QueryError when the query type is missing or unknown."""
    tokens = tokenize(text)
    if not tokens:
        raise QueryError("Empty query")

    pos = 1
    if tokens[0].is_keyword("TABLE"):
        query_type = QueryType.table
        if len(tokens) > 2 and tokens[1].is_keyword("WITHOUT") and tokens[2].is_keyword("ID"):
            query_type = QueryType.table_without_id
            pos = 3
    elif tokens[0].is_keyword("LIST"):
        query_type = QueryType.list
    else:
        raise QueryError(f"Unsupported query type: {tokens[0].text!r}")

    ast = QueryAST(query_type=query_type)
    projection, pos = _take_clause(tokens, pos)
    if query_type is QueryType.list:
        if projection:
            log.debug("LIST projections are not supported; ignoring %d token(s)", len(projection))
    else:
        ast.fields = _parse_fields(projection)

    while pos < len(tokens):
        keyword = tokens[pos].text.upper()
        body, pos = _take_clause(tokens, pos + 1)
        if keyword == "FROM":
            _parse_source(body, ast)
        elif keyword == "WHERE":
            _parse_where(body, ast)
        elif keyword == "SORT":
            _parse_sort(body, ast)
        elif keyword == "LIMIT":
            _parse_limit(body, ast)
        else:
            log.warning("Ignoring unsupported %s clause", keyword)
            ast.ignored.append(keyword)
    return ast
