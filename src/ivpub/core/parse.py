"""File discovery and frontmatter extraction for vault documents"""

import re
from pathlib import Path
from typing import Any

import yaml

from ivpub.core.models import ParsedDoc
from ivpub.core.utils.slug import normalize_slug, slugify_path


FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*(?:\n|$)', re.DOTALL)
MD_EXTENSIONS = {'.md', '.mdx'}


def _strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with YAML header removed."""
    m = FRONTMATTER_RE.match(text)
    if m:
        try:
            fm = yaml.safe_load(m.group(1)) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML frontmatter: {e}") from e
        if not isinstance(fm, dict):
            raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
        return fm, text[m.end():]
    return {}, text


def discover_files(path: Path) -> list[Path]:
    """Return sorted .md/.mdx files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in MD_EXTENSIONS)


def parse_file(path: Path, root: Path | None = None) -> ParsedDoc:
    """Parse a single markdown file; paths and slugs are relative to root (default: its folder)."""
    raw = path.read_text(encoding='utf-8')
    frontmatter, body = _strip_frontmatter(raw)
    rel_path = path.relative_to(root or path.parent).as_posix()
    slug = normalize_slug(str(frontmatter['slug'])) if frontmatter.get('slug') else slugify_path(rel_path)
    return ParsedDoc(
        path=path,
        rel_path=rel_path,
        slug=slug,
        title=str(frontmatter.get('title') or path.stem),
        markdown=body,
        frontmatter=frontmatter,
    )


def parse_dir(path: Path) -> list[ParsedDoc]:
    """Parse all .md/.mdx files under path (file or directory)."""
    root = path if path.is_dir() else path.parent
    return [parse_file(p, root) for p in discover_files(path)]
