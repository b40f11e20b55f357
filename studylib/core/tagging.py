"""Tag normalization for library items.

Tags are free-form labels. The canonical form is the trimmed, lowercased
string; a tag that is blank after trimming is not a tag.
"""

from typing import Iterable, Optional


def normalize_tag(tag: Optional[str]) -> str:
    """Normalize a tag name to its canonical form.

    Args:
        tag: Raw tag name (None is treated as blank).

    Returns:
        Trimmed, lowercased tag; empty string if nothing is left.

    Examples:
        >>> normalize_tag("  Java ")
        'java'
        >>> normalize_tag("Design Patterns")
        'design patterns'
        >>> normalize_tag("   ")
        ''
    """
    if tag is None:
        return ""
    return tag.strip().lower()


def normalize_tags(tags: Iterable[Optional[str]]) -> frozenset[str]:
    """Normalize a collection of tags, dropping blanks and duplicates."""
    return frozenset(t for t in (normalize_tag(tag) for tag in tags) if t)


def parse_user_tags(user_input: str, existing_tags: Optional[list[str]] = None) -> list[str]:
    """Parse comma-separated tag input from the command line.

    Handles:
    - Comma-separated tag names
    - Numbers referencing positions in existing_tags (1-based, as listed
      by `studylib tags`)

    Args:
        user_input: Raw user input string.
        existing_tags: Sorted tag vocabulary for number references.

    Returns:
        List of normalized tag names, duplicates removed, input order kept.

    Examples:
        >>> parse_user_tags("Java, backend ,, java")
        ['java', 'backend']
        >>> parse_user_tags("1, python", ["java", "sql"])
        ['java', 'python']
    """
    if not user_input or not user_input.strip():
        return []

    existing_tags = existing_tags or []
    result = []

    for part in (p.strip() for p in user_input.split(",")):
        if not part:
            continue

        if part.isdigit() and existing_tags:
            idx = int(part) - 1
            if 0 <= idx < len(existing_tags):
                result.append(existing_tags[idx])
            continue

        normalized = normalize_tag(part)
        if normalized:
            result.append(normalized)

    return list(dict.fromkeys(result))


def unresolved_tag_numbers(user_input: str, existing_tags: Optional[list[str]] = None) -> list[str]:
    """Return the numbers in user_input that parse_user_tags() drops.

    A number is dropped when a vocabulary is given but has no entry at that
    1-based position.
    """
    if not existing_tags or not user_input:
        return []
    return [
        part
        for part in (p.strip() for p in user_input.split(","))
        if part.isdigit() and not 1 <= int(part) <= len(existing_tags)
    ]
