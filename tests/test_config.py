"""Tests for configuration loading."""

import pytest
import yaml

import orgblocks.config
from orgblocks.config import Config, parse_edit_style
from orgblocks.errors import ConfigError
from orgblocks.expander import EditStyle


def test_defaults():
    config = Config()
    assert config.begin_line_only is True
    assert config.explicit_lang_defaults is True
    assert config.edit_style is EditStyle.AUTO
    assert config.content_indentation == 2
    assert "quote" in config.tables.structure_templates.values()


def test_load_creates_template(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = Config.load()

    assert orgblocks.config.CONFIG_FILE.exists()
    assert config.edit_style is EditStyle.AUTO
    assert config.begin_line_only is True


def test_local_file_overrides_global(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    orgblocks.config.ensure_config_file()
    orgblocks.config.CONFIG_FILE.write_text(yaml.dump({
        "edit_style": "prompt",
        "content_indentation": 4,
    }))
    (tmp_path / ".orgblocks.yaml").write_text(yaml.dump({
        "edit_style": "inline",
        "tables": {
            "load_languages": {"python": True},
            "default_header_args": {
                "python": [[":exports", "both"], [":results", "output"]],
            },
        },
    }))

    config = Config.load()

    assert config.edit_style is EditStyle.INLINE
    assert config.content_indentation == 4
    assert config.tables.load_languages == {"python": True}
    assert config.tables.header_args("python") == [(":exports", "both"), (":results", "output")]
    # Untouched tables keep their defaults
    assert config.tables.structure_templates["q"] == "quote"


def test_env_overrides_files(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".orgblocks.yaml").write_text(yaml.dump({"begin_line_only": True}))
    monkeypatch.setenv("ORGBLOCKS_BEGIN_LINE_ONLY", "false")
    monkeypatch.setenv("ORGBLOCKS_EDIT_STYLE", "Prompt")
    monkeypatch.setenv("ORGBLOCKS_INDENTATION", "0")

    config = Config.load()

    assert config.begin_line_only is False
    assert config.edit_style is EditStyle.PROMPT
    assert config.content_indentation == 0


def test_unreadable_file_is_ignored(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".orgblocks.yaml").write_text("edit_style: [unclosed")
    assert Config.load().edit_style is EditStyle.AUTO


def test_unknown_edit_style(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".orgblocks.yaml").write_text("edit_style: sometimes\n")
    with pytest.raises(ConfigError, match="sometimes"):
        Config.load()


@pytest.mark.parametrize("value,expected", [
    ("auto", EditStyle.AUTO),
    (" INLINE ", EditStyle.INLINE),
    (EditStyle.PROMPT, EditStyle.PROMPT),
])
def test_parse_edit_style(value, expected):
    assert parse_edit_style(value) is expected


def test_null_table_section_is_empty():
    config = Config.from_dict({"tables": {"tangle_lang_exts": None}})
    assert config.tables.tangle_lang_exts == {}


def test_header_args_mapping_form():
    config = Config.from_dict({"tables": {"default_header_args": {"C": {":tangle": "yes"}}}})
    assert config.tables.header_args("C") == [(":tangle", "yes")]


def test_to_dict_round_trips_settings():
    config = Config(edit_style=EditStyle.PROMPT, begin_line_only=False)
    config.tables.set_header_args("python", [(":session", "s")])

    again = Config.from_dict(config.to_dict())

    assert again.edit_style is EditStyle.PROMPT
    assert again.begin_line_only is False
    assert again.tables.header_args("python") == [(":session", "s")]


@pytest.mark.parametrize("tables", [
    {"default_header_args": {"python": [[":exports"]]}},
    {"default_header_args": {"python": [":exports both"]}},
    {"default_header_args": ["python"]},
    {"load_languages": ["python"]},
    {"structure_templates": "quote"},
    ["python"],
])
def test_malformed_tables_raise_config_error(tables):
    with pytest.raises(ConfigError):
        Config.from_dict({"tables": tables})


def test_malformed_tables_in_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".orgblocks.yaml").write_text("tables:\n  tangle_lang_exts: [py]\n")
    with pytest.raises(ConfigError, match="tangle_lang_exts"):
        Config.load()
