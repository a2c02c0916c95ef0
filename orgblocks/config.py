"""Configuration and environment variables."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .expander import EditStyle
from .tables import OrgTables

# Global config directory
CONFIG_DIR = Path.home() / ".orgblocks"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
LOCAL_CONFIG = ".orgblocks.yaml"

# Template for new config file
CONFIG_TEMPLATE = """# orgblocks configuration

# Only complete "<" when it is the first character of the line
begin_line_only: true

# Append per-language default header args to "#+begin_src <lang>"
explicit_lang_defaults: true

# After expansion: inline (stay put), prompt (ask), auto (always open block editor)
edit_style: auto

# Spaces on the blank line inside a new block
content_indentation: 2

# Treat every file as an Org document, whatever its suffix
force_org_mode: false

# Write expansion events to ~/.orgblocks/logs
log_events: true

# Lookup tables. Omitted sections keep the built-in defaults.
# tables:
#   load_languages:
#     emacs-lisp: true
#     python: true
#   structure_templates:
#     q: quote
#     s: src
#   tangle_lang_exts:
#     python: py
#   default_header_args:
#     python:
#       - [":exports", "both"]
#       - [":results", "output"]
"""


def ensure_config_dir() -> Path:
    """Create config directory if it doesn't exist."""
    if not CONFIG_DIR.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR


def ensure_config_file() -> Path:
    """Create template config file if it doesn't exist."""
    ensure_config_dir()
    if not CONFIG_FILE.exists():
        CONFIG_FILE.write_text(CONFIG_TEMPLATE)
    return CONFIG_FILE


def parse_edit_style(value: Any) -> EditStyle:
    """Convert a config value to an EditStyle."""
    if isinstance(value, EditStyle):
        return value
    try:
        return EditStyle(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(s.value for s in EditStyle)
        raise ConfigError(f"Unknown edit style {value!r} (expected one of: {choices})")


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    """Completion settings, read at the moment of use."""

    begin_line_only: bool = True
    explicit_lang_defaults: bool = True
    edit_style: EditStyle = EditStyle.AUTO
    content_indentation: int = 2
    force_org_mode: bool = False
    log_events: bool = True
    tables: OrgTables = field(default_factory=OrgTables)

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from file and environment variables.

        Config priority (later overrides earlier):
        1. ~/.orgblocks/config.yaml (global)
        2. .orgblocks.yaml (local project)
        3. Environment variables
        """
        config_data = {}
        tables_data = {}

        # Ensure global config exists (creates template on first run)
        ensure_config_file()

        config_paths = [
            str(CONFIG_FILE),
            os.path.join(os.getcwd(), LOCAL_CONFIG),
        ]

        for path in config_paths:
            if os.path.exists(path):
                try:
                    with open(path, "r") as f:
                        file_data = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError):
                    continue  # Ignore unreadable config files
                if not isinstance(file_data, dict):
                    continue
                if isinstance(file_data.get("tables"), dict):
                    tables_data.update(file_data.pop("tables"))
                config_data.update(file_data)

        config = cls.from_dict(config_data)
        config.tables = OrgTables.from_dict(tables_data)

        # Override with environment variables (highest priority)
        if os.getenv("ORGBLOCKS_BEGIN_LINE_ONLY"):
            config.begin_line_only = _env_flag(os.environ["ORGBLOCKS_BEGIN_LINE_ONLY"])
        if os.getenv("ORGBLOCKS_EXPLICIT_LANG_DEFAULTS"):
            config.explicit_lang_defaults = _env_flag(os.environ["ORGBLOCKS_EXPLICIT_LANG_DEFAULTS"])
        if os.getenv("ORGBLOCKS_EDIT_STYLE"):
            config.edit_style = parse_edit_style(os.environ["ORGBLOCKS_EDIT_STYLE"])
        if os.getenv("ORGBLOCKS_INDENTATION"):
            try:
                config.content_indentation = int(os.environ["ORGBLOCKS_INDENTATION"])
            except ValueError:
                raise ConfigError("ORGBLOCKS_INDENTATION must be an integer")

        return config

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Build a config from plain settings, ignoring unknown keys."""
        config = cls()
        if "begin_line_only" in data:
            config.begin_line_only = bool(data["begin_line_only"])
        if "explicit_lang_defaults" in data:
            config.explicit_lang_defaults = bool(data["explicit_lang_defaults"])
        if "edit_style" in data:
            config.edit_style = parse_edit_style(data["edit_style"])
        if "content_indentation" in data:
            try:
                config.content_indentation = int(data["content_indentation"])
            except (TypeError, ValueError):
                raise ConfigError("content_indentation must be an integer")
        if "force_org_mode" in data:
            config.force_org_mode = bool(data["force_org_mode"])
        if "log_events" in data:
            config.log_events = bool(data["log_events"])
        if "tables" in data:
            config.tables = OrgTables.from_dict(data["tables"])
        return config

    def to_dict(self) -> dict[str, Any]:
        """Return current config as a dict."""
        return {
            "begin_line_only": self.begin_line_only,
            "explicit_lang_defaults": self.explicit_lang_defaults,
            "edit_style": self.edit_style.value,
            "content_indentation": self.content_indentation,
            "force_org_mode": self.force_org_mode,
            "log_events": self.log_events,
            "tables": self.tables.to_dict(),
        }

    @staticmethod
    def get_config_path() -> Path:
        """Return path to global config file."""
        return CONFIG_FILE
