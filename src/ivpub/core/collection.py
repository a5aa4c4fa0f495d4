"""Build the filename lookup table and query collection from parsed documents"""

import logging
import re
from collections.abc import Iterable
from pathlib import PurePosixPath

from ivpub.core.models import DocumentRecord, FileInfo, ParsedDoc, RenderContext
from ivpub.core.utils.slug import lookup_key


log = logging.getLogger(__name__)

_TAG_SPLIT = re.compile(r'[,\s]+')


def normalize_tags(raw) -> list[str]:
    """Frontmatter tags as a list without leading '#', from a list or a 'a, #b c' string."""
    if raw is None:
        return []
    items = raw if isinstance(raw, (list, tuple)) else _TAG_SPLIT.split(str(raw))
    tags = (str(t).strip().lstrip('#') for t in items if t is not None)
    return list(dict.fromkeys(t for t in tags if t))


def to_record(doc: ParsedDoc) -> DocumentRecord:
    fm = doc.frontmatter
    return DocumentRecord(
        path=doc.rel_path,
        slug=doc.slug,
        title=doc.title,
        tags=normalize_tags(fm.get('tags', fm.get('tag'))),
        fields={str(k): v for k, v in fm.items()},
    )


def _depth_then_path(doc: ParsedDoc) -> tuple[int, str]:
    return len(PurePosixPath(doc.rel_path).parts), doc.rel_path


def build_file_lookup(docs: Iterable[ParsedDoc]) -> dict[str, FileInfo]:
    """Map lowercased filename stem -> FileInfo.

    When several files share a stem, the shallowest path wins, then the
    lexicographically smallest; load order never matters.
    """
    candidates: dict[str, list[ParsedDoc]] = {}
    for doc in docs:
        candidates.setdefault(lookup_key(doc.rel_path), []).append(doc)

    lookup: dict[str, FileInfo] = {}
    for key, group in candidates.items():
        chosen = min(group, key=_depth_then_path)
        if len(group) > 1:
            log.debug(
                "Basename %r is shared by %d files; linking to %s",
                key, len(group), chosen.rel_path,
            )
        lookup[key] = FileInfo(slug=chosen.slug, title=chosen.title, path=chosen.rel_path)
    return lookup


def build_context(docs: Iterable[ParsedDoc]) -> RenderContext:
    docs = list(docs)
    return RenderContext(
        file_lookup=build_file_lookup(docs),
        documents=tuple(to_record(d) for d in docs),
    )
