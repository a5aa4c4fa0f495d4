"""Markdown rendering with mechanics and query fences hooked into markdown-it"""

import logging

from markdown_it import MarkdownIt

from ivpub.core.models import DocumentRecord, RenderContext
from ivpub.core.utils.slug import escape_html
from ivpub.dataview.execute import as_text, run_query
from ivpub.dataview.models import ListResult, QueryError, TableResult
from ivpub.mechanics.blocks import parse_block
from ivpub.mechanics.inline import parse_inline


log = logging.getLogger(__name__)

MECHANICS_FENCE = 'iron-vault-mechanics'
QUERY_FENCE = 'dataview'


def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def _cell(value) -> str:
    return '' if value is None else escape_html(as_text(value))


def _doc_link(link) -> str:
    return f'<a href="{escape_html(link.slug)}">{escape_html(link.title)}</a>'


def render_table(result: TableResult) -> str:
    head = ''.join(f'<th>{escape_html(h)}</th>' for h in result.headers)
    rows = []
    for row in result.rows:
        cells = [_doc_link(row.link)] if result.with_id else []
        cells += [_cell(v) for v in row.values]
        rows.append('<tr>' + ''.join(f'<td>{c}</td>' for c in cells) + '</tr>')
    return (
        '<table class="dataview table-view-table">'
        f'<thead><tr>{head}</tr></thead>'
        f'<tbody>{"".join(rows)}</tbody>'
        '</table>\n'
    )


def render_list(result: ListResult) -> str:
    items = ''.join(f'<li>{_doc_link(link)}</li>' for link in result.links)
    return f'<ul class="dataview list-view-ul">{items}</ul>\n'


def render_query(text: str, documents: tuple[DocumentRecord, ...]) -> str:
    """Run a query fence; query errors render as an error paragraph."""
    try:
        result = run_query(text, documents)
    except QueryError as e:
        log.warning("Dataview query failed: %s", e)
        return f'<p class="error">Query error: {escape_html(str(e))}</p>\n'
    if isinstance(result, ListResult):
        return render_list(result)
    return render_table(result)


def make_renderer(
    context: RenderContext,
    preset: str = 'gfm-like',
    mechanics_fence: str = MECHANICS_FENCE,
    query_fence: str = QUERY_FENCE,
    ) -> MarkdownIt:
    """MarkdownIt whose inline code and fence rules delegate to the mechanics parsers."""
    md = _make_parser(preset)
    default_code_inline = md.renderer.rules['code_inline']
    default_fence = md.renderer.rules['fence']

    def code_inline(self, tokens, idx, options, env):
        html = parse_inline(tokens[idx].content, context.file_lookup)
        if html is None:
            return default_code_inline(tokens, idx, options, env)
        return html

    def fence(self, tokens, idx, options, env):
        token = tokens[idx]
        info = token.info.strip().split(maxsplit=1)
        lang = info[0] if info else ''
        if lang == mechanics_fence:
            return parse_block(token.content) + '\n'
        if lang == query_fence:
            return render_query(token.content, context.documents)
        return default_fence(tokens, idx, options, env)

    md.add_render_rule('code_inline', code_inline)
    md.add_render_rule('fence', fence)
    return md


def render_markdown(text: str, context: RenderContext | None = None, preset: str = 'gfm-like') -> str:
    return make_renderer(context or RenderContext(), preset).render(text)
