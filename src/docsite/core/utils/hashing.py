"""Content hashes for change detection and staging file names"""

import hashlib
import json
from typing import Any


def sha256(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def content_hash(markdown: str, frontmatter: dict[str, Any]) -> str:
    """Hash body and front matter together so metadata-only edits count as changes.

    Keys are sorted, so reordering the YAML header alone does not change the hash.
    """
    header = json.dumps(frontmatter, sort_keys=True, default=str)
    return sha256(f"{header}\n{markdown}")
