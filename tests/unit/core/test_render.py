"""Unit tests for core/render.py"""

from ivpub.core.models import DocumentRecord, FileInfo, RenderContext
from ivpub.core.render import render_markdown, render_query


DOCS = (
    DocumentRecord(path="Progress/Vow.md", slug="/progress/vow", title="Vow",
                   tags=["quest"], fields={"rank": "epic", "status": "active"}),
    DocumentRecord(path="Progress/Relic.md", slug="/progress/relic", title="Relic",
                   tags=["quest"], fields={"rank": "dangerous", "status": "done"}),
)


def test_inline_mechanics_replace_code_spans():
    html = render_markdown("I act: `iv-move:Face Danger|edge|4|3|0|3|5`.")
    assert '<span class="iv-inline-mechanics strong-hit">' in html
    assert "<code>" not in html


def test_ordinary_inline_code_is_untouched():
    html = render_markdown("Run `make all` & `iv-unknown:x`.")
    assert "<code>make all</code>" in html
    assert "<code>iv-unknown:x</code>" in html


def test_inline_links_use_context_lookup():
    context = RenderContext(file_lookup={
        "kira": FileInfo(slug="/characters/kira", title="Kira", path="Characters/Kira.md"),
    })
    html = render_markdown("`iv-entity-create:NPC|Kira|Kira`", context)
    assert 'href="/characters/kira"' in html


def test_mechanics_fence_renders_article():
    text = '```iron-vault-mechanics\nmeter "health" from=5 to=4\n```\n'
    html = render_markdown(text)
    assert html.startswith('<article class="iron-vault-mechanics"><dl class="meter">')
    assert "<pre>" not in html


def test_other_fences_render_as_code():
    html = render_markdown("```python\nprint('hi')\n```\n")
    assert '<pre><code class="language-python">' in html


def test_query_fence_renders_table():
    text = '```dataview\nTABLE rank FROM "Progress" SORT file.name ASC\n```\n'
    html = render_markdown(text, RenderContext(documents=DOCS))
    assert '<table class="dataview table-view-table">' in html
    assert "<thead><tr><th>File</th><th>rank</th></tr></thead>" in html
    assert html.index("Relic") < html.index("Vow")
    assert '<td><a href="/progress/vow">Vow</a></td><td>epic</td>' in html


def test_query_list():
    html = render_query('LIST FROM #quest WHERE status = "active"', DOCS)
    assert html == '<ul class="dataview list-view-ul"><li><a href="/progress/vow">Vow</a></li></ul>\n'


def test_query_error_renders_paragraph():
    html = render_query("TASK FROM #quest", DOCS)
    assert html.startswith('<p class="error">Query error: ')


def test_table_without_id_and_missing_cells():
    html = render_query("TABLE WITHOUT ID file.name, missing", DOCS)
    assert "<th>File</th>" not in html
    assert "<td>Vow</td><td></td>" in html
