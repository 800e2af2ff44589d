"""String helpers for note names and note bodies."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Mapping

import yaml

_NON_SLUG = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")


def slugify(text: str) -> str:
    """Lowercase, drop special characters, and join words with hyphens."""
    text = text.lower().replace("\n", " ")
    text = _NON_SLUG.sub("", text)
    text = _WHITESPACE.sub("-", text)
    return text.strip("-")


def dedent(text: str) -> str:
    """Remove the smallest common indentation of non-blank lines.

    Unlike :func:`textwrap.dedent`, tabs and spaces count equally and
    shorter lines are stripped instead of left alone.
    """
    lines = text.split("\n")

    indents = [
        len(line) - len(line.lstrip(" \t"))
        for line in lines
        if line.strip()
    ]
    min_indent = min(indents, default=0)
    if min_indent <= 0:
        return text

    return "\n".join(
        line[min_indent:] if len(line) >= min_indent else line.lstrip(" \t")
        for line in lines
    )


def object_to_frontmatter(obj: Mapping[str, Any]) -> str:
    """Render a mapping as a YAML frontmatter block body (without fences).

    Keys keep their order; values are quoted as YAML requires, so titles
    such as ``Re: plan #1`` load back unchanged.
    """
    if not obj:
        return ""
    return yaml.safe_dump(
        dict(obj), sort_keys=False, allow_unicode=True, default_flow_style=False
    ).rstrip("\n")


def generate_note_content(
    title: str = "",
    template: str = "",
    templates: Mapping[str, str] | None = None,
    now: datetime | None = None,
) -> str:
    """Build the initial body of a new note.

    A known ``template`` is used verbatim, with ``{{title}}`` substituted when
    a title is given. Otherwise the note gets a frontmatter block with the
    title and creation time, and a heading.
    """
    if template and templates and template in templates:
        body = templates[template]
        if title:
            return body.replace("{{title}}", title)
        return body

    created = (now or datetime.now().astimezone()).isoformat(timespec="seconds")
    meta: dict[str, Any] = {}
    if title:
        meta["title"] = title
    meta["created"] = created

    content = f"---\n{object_to_frontmatter(meta)}\n---\n\n"
    if title:
        content += f"# {title}\n\n"
    return content
