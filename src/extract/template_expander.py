"""Regex template expansion over every pattern match.

Templates reference capture groups with ``$name`` or ``${name}``, where the
name is a group number (``$0`` is the whole match) or a named group, and
``$$`` is a literal dollar sign. Each template is expanded against every
match in the content and the results are concatenated in match order.
"""

from __future__ import annotations

import re
from typing import Mapping

_REFERENCE_PATTERN = re.compile(r"\$(?:(\$)|\{(\w+)\}|(\w+))")


def expand_templates(
    templates: Mapping[str, str],
    pattern: re.Pattern[str],
    content: str,
) -> dict[str, str]:
    """Expand each template against all matches of ``pattern`` in ``content``.

    Args:
        templates: Output name to template string.
        pattern: Compiled regular expression.
        content: Text scanned for non-overlapping matches. An empty match
            that abuts the previous match is skipped.

    Returns:
        Output name to concatenated expansion. Every name maps to an empty
        string when the pattern never matches.
    """
    matches = _find_matches(pattern, content)
    expanded: dict[str, str] = {}
    for name, template in templates.items():
        expanded[name] = "".join(expand_match(template, match) for match in matches)
    return expanded


def _find_matches(pattern: re.Pattern[str], content: str) -> list[re.Match[str]]:
    # An empty match directly after the previous match is not a new match.
    matches: list[re.Match[str]] = []
    previous_end = -1
    for match in pattern.finditer(content):
        if match.start() == match.end() == previous_end:
            continue
        matches.append(match)
        previous_end = match.end()
    return matches


def expand_match(template: str, match: re.Match[str]) -> str:
    """Expand one template against a single match.

    Args:
        template: Template string with ``$`` group references.
        match: Regex match supplying group values.

    Returns:
        Expanded text, with unresolved references replaced by empty text.
    """

    def _substitute(reference: re.Match[str]) -> str:
        if reference.group(1):
            return "$"
        return _group_text(match, reference.group(2) or reference.group(3))

    return _REFERENCE_PATTERN.sub(_substitute, template)


def _group_text(match: re.Match[str], name: str) -> str:
    if name.isascii() and name.isdigit():
        index = int(name)
        if index > match.re.groups:
            return ""
        return match.group(index) or ""
    if name not in match.re.groupindex:
        return ""
    return match.group(name) or ""
