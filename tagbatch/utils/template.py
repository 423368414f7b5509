"""
Parses and renders file name templates.

Templates use `{field}` placeholders (with an optional format spec, e.g.
`{tracknumber:>3}`) and conditionals of the form `%{?field,present|absent}`.
"""

import re
import string
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pathvalidate import sanitize_filename, sanitize_filepath

from tagbatch.exceptions import TemplateError
from tagbatch.models.files import FileDescriptor

KNOWN_FIELDS = frozenset(
    {
        "title",
        "artist",
        "artists",
        "album",
        "albumartist",
        "tracknumber",
        "discnumber",
        "year",
        "genre",
        "isrc",
        "filename",
        "ext",
    }
)

_CONDITIONAL_OPEN = "%{?"
_FIELD_NAME_RE = re.compile(r"\w+")
_formatter = string.Formatter()


@dataclass(frozen=True)
class ParsedTemplate:
    source: str
    fields: frozenset[str]


def _scan_branch(template: str, start: int, stop: str) -> int:
    """Returns the index of `stop` at brace depth zero, starting at `start`."""
    depth = 0
    for index in range(start, len(template)):
        char = template[index]
        if char == "{":
            depth += 1
        elif char == "}" and depth:
            depth -= 1
        elif char == stop and depth == 0:
            return index
        elif char == "}":
            raise TemplateError(f"Unbalanced '}}' in conditional of '{template}'.")
    raise TemplateError(f"Unterminated conditional in template '{template}'.")


def _resolve_conditionals(
    template: str, choose: Callable[[str, str, str], str]
) -> str:
    """
    Replaces every `%{?field,present|absent}` with what `choose` returns
    for it. Branches may hold placeholders and nested conditionals.
    """
    parts = []
    position = 0
    while (start := template.find(_CONDITIONAL_OPEN, position)) != -1:
        name_start = start + len(_CONDITIONAL_OPEN)
        comma = template.find(",", name_start)
        name = template[name_start:comma] if comma != -1 else ""
        if not _FIELD_NAME_RE.fullmatch(name):
            raise TemplateError(f"Malformed conditional in template '{template}'.")
        bar = _scan_branch(template, comma + 1, "|")
        end = _scan_branch(template, bar + 1, "}")
        parts.append(template[position:start])
        parts.append(choose(name, template[comma + 1 : bar], template[bar + 1 : end]))
        position = end + 1
    parts.append(template[position:])
    return "".join(parts)


def parse(template: str) -> ParsedTemplate:
    """
    Validates a template and collects the fields it references.

    Raises:
        TemplateError: If the template is malformed or uses an unknown field.
    """
    if not template or not template.strip():
        raise TemplateError("Template cannot be empty.")

    fields: set[str] = set()

    def both_branches(name: str, present: str, absent: str) -> str:
        fields.add(name)
        return _resolve_conditionals(present, both_branches) + _resolve_conditionals(
            absent, both_branches
        )

    plain = _resolve_conditionals(template, both_branches)
    try:
        for _literal, field_name, _spec, _conv in _formatter.parse(plain):
            if field_name is None:
                continue
            if not field_name:
                raise TemplateError("Positional placeholders '{}' are not allowed.")
            fields.add(field_name)
    except ValueError as e:
        raise TemplateError(f"Malformed template '{template}': {e}") from e

    unknown = sorted(fields - KNOWN_FIELDS)
    if unknown:
        raise TemplateError(
            f"Unknown template field(s): {', '.join(unknown)}. "
            f"Available: {', '.join(sorted(KNOWN_FIELDS))}."
        )
    return ParsedTemplate(source=template, fields=frozenset(fields))


def template_vars(file: FileDescriptor, separator: str) -> dict[str, Any]:
    """Builds the variable dictionary for template rendering."""
    artists = separator.join(file.artists)
    return {
        "title": file.title or file.path.stem,
        "artist": file.artists[0] if file.artists else "",
        "artists": artists,
        "album": file.album or "",
        "albumartist": separator.join(file.album_artists) or artists,
        "tracknumber": f"{file.track_number:02}" if file.track_number else "",
        "discnumber": str(file.disc_number) if file.disc_number else "",
        "year": file.year or "",
        "genre": separator.join(file.genres),
        "isrc": file.isrc or "",
        "filename": file.path.stem,
        "ext": file.format,
    }


def render(parsed: ParsedTemplate, variables: dict[str, Any]) -> str:
    """Renders a parsed template into a sanitized relative path. Pure."""
    safe = {
        key: sanitize_filename(str(value)) if isinstance(value, str) else value
        for key, value in variables.items()
    }

    def pick_branch(name: str, present: str, absent: str) -> str:
        return _resolve_conditionals(present if safe.get(name) else absent, pick_branch)

    resolved = _resolve_conditionals(parsed.source, pick_branch)
    try:
        formatted = resolved.format(**safe)
    except (KeyError, ValueError, IndexError) as e:
        raise TemplateError(f"Failed rendering template '{parsed.source}': {e}") from e
    return str(sanitize_filepath(formatted.strip(), platform="auto"))
