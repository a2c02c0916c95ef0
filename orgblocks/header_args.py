"""Rendering of per-language default header arguments."""

from typing import Any, Callable, Iterable, Optional

HeaderLookup = Callable[[str], Optional[Iterable[tuple[str, Any]]]]


def header_defaults(lang: str, lookup: HeaderLookup) -> str:
    """Render the default header args of *lang* as an opening-line suffix.

    Each pair adds ``" <option> <value>"`` in order, so a non-empty result
    always starts with a space::

        >>> header_defaults("python", {"python": [(":exports", "both")]}.get)
        ' :exports both'

    Returns an empty string when *lang* has no entry.
    """
    pairs = lookup(lang)
    if not pairs:
        return ""

    result = ""
    for name, value in pairs:
        result = f"{result} {name} {value}"
    return result
