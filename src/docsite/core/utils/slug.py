"""Slug generation for document identifiers and heading anchors"""

import re
from pathlib import PurePosixPath


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def path_slug(rel_path: str) -> str:
    """Slug for a root-relative path: 'ios/Legacy Color.md' -> 'ios-legacy-color'."""
    stem = PurePosixPath(rel_path).with_suffix('')
    return slugify(' '.join(stem.parts))


def anchor_id(text: str, seen: dict[str, int]) -> str:
    """GitHub-style heading anchor; repeats get -1, -2 suffixes tracked in seen."""
    base = re.sub(r'[^\w\s-]', '', text.strip().lower())
    base = re.sub(r'\s', '-', base) or 'section'
    count = seen.get(base, 0)
    seen[base] = count + 1
    return base if count == 0 else f"{base}-{count}"
