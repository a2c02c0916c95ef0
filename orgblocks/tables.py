"""Host-owned lookup tables for block templates and languages.

These mirror the Org variables a structured document mode keeps around:
which languages are loaded, the structure template aliases, the tangle
extension per language and the per-language default header arguments.
The completion code only ever reads them.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import ConfigError

HEADER_ARGS_PREFIX = "default-header-args"

DEFAULT_STRUCTURE_TEMPLATES = {
    "a": "export ascii",
    "c": "center",
    "C": "comment",
    "e": "example",
    "E": "export",
    "h": "export html",
    "l": "export latex",
    "q": "quote",
    "s": "src",
    "v": "verse",
}

DEFAULT_LOAD_LANGUAGES = {
    "emacs-lisp": True,
}

DEFAULT_TANGLE_LANG_EXTS = {
    "emacs-lisp": "el",
    "elisp": "el",
    "python": "py",
    "shell": "sh",
    "C": "c",
    "js": "js",
    "ruby": "rb",
}


def header_args_name(lang: str) -> str:
    """Conventional name of the default header args entry for *lang*."""
    return f"{HEADER_ARGS_PREFIX}:{lang}"


def _section(data: dict, key: str) -> dict:
    value = data[key] or {}
    if not isinstance(value, dict):
        raise ConfigError(f"tables.{key} must be a mapping")
    return value


def _pairs(lang: str, value: Any) -> list[tuple[str, Any]]:
    """Normalize YAML header args (mapping or list of pairs) to ordered pairs."""
    if isinstance(value, dict):
        return [(str(k), v) for k, v in value.items()]
    pairs = []
    for item in value or []:
        if not isinstance(item, (list, tuple)) or len(item) != 2:
            raise ConfigError(f"default_header_args.{lang}: expected [option, value], got {item!r}")
        pairs.append((str(item[0]), item[1]))
    return pairs


@dataclass
class OrgTables:
    """The four tables a document mode exposes to completion."""

    load_languages: dict[str, bool] = field(
        default_factory=lambda: dict(DEFAULT_LOAD_LANGUAGES))
    structure_templates: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_STRUCTURE_TEMPLATES))
    tangle_lang_exts: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_TANGLE_LANG_EXTS))
    # header_args_name(lang) -> [(option, value), ...]
    default_header_args: dict[str, list[tuple[str, Any]]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "OrgTables":
        """Build tables from the ``tables:`` section of a config file.

        Sections that are absent keep Org's defaults; a section set to
        ``null`` becomes an empty table.
        """
        tables = cls()
        if not data:
            return tables
        if not isinstance(data, dict):
            raise ConfigError("tables must be a mapping")

        if "load_languages" in data:
            tables.load_languages = {
                str(k): bool(v) for k, v in _section(data, "load_languages").items()
            }
        if "structure_templates" in data:
            tables.structure_templates = {
                str(k): str(v) for k, v in _section(data, "structure_templates").items()
            }
        if "tangle_lang_exts" in data:
            tables.tangle_lang_exts = {
                str(k): str(v) for k, v in _section(data, "tangle_lang_exts").items()
            }
        if "default_header_args" in data:
            tables.default_header_args = {}
            for lang, pairs in _section(data, "default_header_args").items():
                tables.set_header_args(str(lang), _pairs(str(lang), pairs))
        return tables

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view, suitable for YAML dumping."""
        prefix = HEADER_ARGS_PREFIX + ":"
        return {
            "load_languages": dict(self.load_languages),
            "structure_templates": dict(self.structure_templates),
            "tangle_lang_exts": dict(self.tangle_lang_exts),
            "default_header_args": {
                name[len(prefix):]: [list(p) for p in pairs]
                for name, pairs in self.default_header_args.items()
            },
        }

    def set_language_loaded(self, lang: str, loaded: bool = True) -> None:
        self.load_languages[lang] = loaded

    def add_template(self, trigger: str, name: str) -> None:
        self.structure_templates[trigger] = name

    def set_header_args(self, lang: str, pairs: list[tuple[str, Any]]) -> None:
        self.default_header_args[header_args_name(lang)] = list(pairs)

    def header_args(self, lang: str) -> Optional[list[tuple[str, Any]]]:
        """Return the default header args for *lang*, or None if it has none."""
        return self.default_header_args.get(header_args_name(lang))

    def is_template(self, name: str) -> bool:
        return name in self.structure_templates.values()
