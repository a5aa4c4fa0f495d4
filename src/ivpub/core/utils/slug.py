"""Slug generation, path resolution, and HTML escaping for rendered links"""

import re
from collections.abc import Mapping
from pathlib import PurePosixPath

from ivpub.core.models import FileInfo


_ESCAPED_SLASH = re.compile(r'\\/')
_WHITESPACE = re.compile(r'\s+')
_STRIPPED = re.compile(r"[()']")
_MD_SUFFIX = re.compile(r'\.md$', re.IGNORECASE)

NO_LINK = '#'


def unescape_path(text: str) -> str:
    """Reverse the notation's escaped separators (``\\/`` -> ``/``)."""
    return _ESCAPED_SLASH.sub('/', text)


def escape_html(text) -> str:
    """Unescape ``\\/`` then HTML-escape ``& < > "`` in user-supplied text."""
    return (
        unescape_path(str(text))
        .replace('&', '&amp;')
        .replace('<', '&lt;')
        .replace('>', '&gt;')
        .replace('"', '&quot;')
    )


def slugify_path(path: str) -> str:
    """Convert a vault-relative path to a site slug with exactly one leading slash.

    'Campaign/Progress/Bond (Kira).md' -> '/campaign/progress/bond-kira'
    """
    path = _MD_SUFFIX.sub('', unescape_path(path))
    path = _WHITESPACE.sub('-', path.lower())
    path = _STRIPPED.sub('', path)
    return '/' + path.lstrip('/')


def normalize_slug(slug: str) -> str:
    """Give a slug from the lookup table the same leading-slash shape as slugify_path."""
    return '/' + slug.lstrip('/')


def lookup_key(path: str) -> str:
    """Lowercased filename without extension; the key of the FileInfo lookup table."""
    name = PurePosixPath(unescape_path(path).replace('\\', '/')).name
    return _MD_SUFFIX.sub('', name).lower()


def resolve_path(path: str, file_lookup: Mapping[str, FileInfo] | None = None) -> str:
    """Resolve a full path or bare filename to a site slug.

    Paths with a separator are slugified directly. Bare filenames are looked up
    by lowercased stem, falling back to slugify_path when absent.
    """
    if not path:
        return NO_LINK
    clean = unescape_path(path)
    if '/' in clean or '\\' in clean:
        return slugify_path(clean)
    if file_lookup:
        info = file_lookup.get(lookup_key(clean))
        if info is not None:
            return normalize_slug(info.slug)
    return slugify_path(clean)


def link_for_path(path: str) -> str:
    """Block-parser resolver: no lookup table, '#' for empty paths."""
    return slugify_path(path) if path else NO_LINK
