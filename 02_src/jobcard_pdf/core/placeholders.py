"""Placeholder substitution for {{field}} tokens."""

import re
from typing import List, Mapping

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")


def resolve_placeholders(text: str, values: Mapping[str, str]) -> str:
    """Replace every {{name}} token with its value in a single pass.

    Names are matched case-sensitively. Tokens without a value stay
    verbatim, and substituted values are never scanned again.

    Args:
        text: Text that may contain placeholder tokens
        values: Mapping of placeholder name to replacement

    Returns:
        Text with known placeholders substituted

    Examples:
        >>> resolve_placeholders("Hi {{name}}", {"name": "Bob"})
        'Hi Bob'
        >>> resolve_placeholders("{{missing}}", {})
        '{{missing}}'
    """
    if not text or "{{" not in text:
        return text or ""

    def substitute(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in values:
            return match.group(0)
        value = values[name]
        return "" if value is None else str(value)

    return PLACEHOLDER_PATTERN.sub(substitute, text)


def find_placeholders(text: str) -> List[str]:
    """List placeholder names referenced in text, in first-seen order."""
    names: List[str] = []
    for match in PLACEHOLDER_PATTERN.finditer(text or ""):
        if match.group(1) not in names:
            names.append(match.group(1))
    return names
