"""Pipeline step functions: load, render, and query orchestration"""

import logging
from pathlib import Path

from ivpub.core.collection import build_context
from ivpub.core.models import ParsedDoc, RenderContext
from ivpub.core.parse import discover_files, parse_dir, parse_file
from ivpub.core.render import MECHANICS_FENCE, QUERY_FENCE, make_renderer
from ivpub.dataview.execute import run_query
from ivpub.dataview.models import ListResult, TableResult


log = logging.getLogger(__name__)


def load_vault(path: Path) -> tuple[list[ParsedDoc], RenderContext]:
    """Parse every document under path and build the shared render context."""
    try:
        docs = parse_dir(path)
        return docs, build_context(docs)
    except ValueError as e:
        raise RuntimeError(f"Failed to load {path}: {e}") from e


def output_path(output_dir: Path, doc: ParsedDoc) -> Path:
    """Fragment path mirroring the site URL: output_dir / slug + '.html'."""
    return output_dir / f"{doc.slug.strip('/') or 'index'}.html"


def run_build(
    path: str,
    output_dir: Path,
    parser_config: str = 'gfm-like',
    mechanics_fence: str = MECHANICS_FENCE,
    query_fence: str = QUERY_FENCE,
    ) -> list[tuple[Path, Path]]:
    """Render every document under path to an HTML fragment. Returns (source, fragment) pairs."""
    docs, context = load_vault(Path(path))
    md = make_renderer(context, parser_config, mechanics_fence, query_fence)
    results = []
    written: dict[Path, Path] = {}
    for doc in docs:
        out_file = output_path(output_dir, doc)
        if out_file in written:
            log.warning("%s and %s both render to %s; the later file wins", written[out_file], doc.path, out_file)
        written[out_file] = doc.path
        try:
            html = md.render(doc.markdown)
            out_file.parent.mkdir(parents=True, exist_ok=True)
            out_file.write_text(html, encoding='utf-8')
            results.append((doc.path, out_file))
        except Exception as e:
            raise RuntimeError(f"Failed to render {doc.path}: {e}") from e
    return results


def run_render(
    file: Path,
    vault: Path | None = None,
    parser_config: str = 'gfm-like',
    mechanics_fence: str = MECHANICS_FENCE,
    query_fence: str = QUERY_FENCE,
    ) -> str:
    """Render one file, resolving links and queries against vault (default: the file's folder)."""
    file = file.resolve()
    root = (vault or file.parent).resolve()
    if not discover_files(file):
        raise RuntimeError(f"Not a markdown file: {file}")
    _, context = load_vault(root)
    try:
        doc = parse_file(file, root if file.is_relative_to(root) else None)
    except ValueError as e:
        raise RuntimeError(f"Failed to load {file}: {e}") from e
    return make_renderer(context, parser_config, mechanics_fence, query_fence).render(doc.markdown)


def run_query_dir(path: str, query: str) -> TableResult | ListResult:
    """Run a query against every document under path; QueryError propagates."""
    _, context = load_vault(Path(path))
    return run_query(query, context.documents)
