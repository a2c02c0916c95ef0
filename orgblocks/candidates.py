"""Candidate listing for block completion.

The catalog is rebuilt from its sources on every query: the host may load
languages or add templates at any time during a session.
"""

from collections.abc import Mapping
from typing import Any, Callable, Iterable, Union

from .logging import get_logger

Source = Union[Mapping, Iterable[str], Callable[[], Any], None]


def _read(source: Source, name: str) -> Any:
    if callable(source):
        try:
            return source()
        except Exception as e:
            get_logger().log_source_error(name, str(e))
            return None
    return source


def _keys(source: Source, name: str) -> list[str]:
    data = _read(source, name)
    if not data:
        return []
    if isinstance(data, Mapping):
        return [str(k) for k in data.keys()]
    return [str(k) for k in data]


def _values(source: Source, name: str) -> list[str]:
    data = _read(source, name)
    if not data:
        return []
    if isinstance(data, Mapping):
        return [str(v) for v in data.values()]
    return [str(v) for v in data]


def catalog(languages: Source, templates: Source, lang_exts: Source) -> list[str]:
    """Assemble every known identifier, sorted.

    Args:
        languages: Loaded languages; contributes its keys.
        templates: Structure templates (trigger -> name); contributes its values.
        lang_exts: Language -> file extension; contributes its keys.

    Each source may be a mapping, an iterable of names, or a callable
    returning one. A missing or failing source contributes nothing.
    Duplicates across sources are kept.
    """
    names = (
        _values(templates, "templates")
        + _keys(languages, "languages")
        + _keys(lang_exts, "lang_exts")
    )
    return sorted(names)


def candidates(prefix: str, languages: Source, templates: Source, lang_exts: Source) -> list[str]:
    """Return catalog entries starting with *prefix* (case-sensitive)."""
    return [
        name for name in catalog(languages, templates, lang_exts)
        if name.startswith(prefix)
    ]
