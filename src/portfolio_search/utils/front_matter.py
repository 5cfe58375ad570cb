"""YAML front matter utilities for markdown/MDX content entries.

Content entries open with a ``---`` delimited YAML block holding their
searchable metadata:

    ---
    title: Exolith Series
    description: Screen prints, 2019-2023
    keywords: [print, screenprint]
    ---
    # Exolith Series

    The series began...
"""

import re
from typing import Any

import yaml


DELIMITER = "---"

_FRONT_MATTER_PATTERN = re.compile(
    rf"^\ufeff?{re.escape(DELIMITER)}[ \t]*\r?\n(.*?)\r?\n{re.escape(DELIMITER)}[ \t]*(?:\r?\n|$)",
    re.DOTALL,
)


def parse_front_matter(content: str) -> tuple[dict[str, Any], str]:
    """Parse YAML front matter from markdown content.

    Args:
        content: Full markdown content including front matter

    Returns:
        Tuple of (front_matter_dict, markdown_body)
        If no front matter is found, or it is not a YAML mapping, returns
        (empty dict, original content)

    Example:
        >>> metadata, body = parse_front_matter("---\\ntitle: Raven\\n---\\n# Raven")
        >>> metadata["title"]
        'Raven'
        >>> body
        '# Raven'
    """
    match = _FRONT_MATTER_PATTERN.match(content)
    if not match:
        return {}, content

    try:
        metadata = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError:
        return {}, content

    if not isinstance(metadata, dict):
        return {}, content

    return metadata, content[match.end() :]


def coerce_keywords(candidate: Any) -> list[str]:
    """Normalize a front matter ``keywords`` value into a list of strings."""
    if isinstance(candidate, list):
        return [str(item) for item in candidate if item is not None and str(item).strip()]
    if isinstance(candidate, str) and candidate.strip():
        return [candidate.strip()]
    return []
