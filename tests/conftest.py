import pytest

import orgblocks.config
import orgblocks.logging


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep config and event logs out of the real home directory."""
    home = tmp_path / "home"
    monkeypatch.setattr(orgblocks.config, "CONFIG_DIR", home / ".orgblocks")
    monkeypatch.setattr(orgblocks.config, "CONFIG_FILE", home / ".orgblocks" / "config.yaml")
    monkeypatch.setattr(orgblocks.logging, "LOG_DIR", home / ".orgblocks" / "logs")
    monkeypatch.setattr(orgblocks.logging, "_logger", None)
    for name in ("ORGBLOCKS_BEGIN_LINE_ONLY", "ORGBLOCKS_EXPLICIT_LANG_DEFAULTS",
                 "ORGBLOCKS_EDIT_STYLE", "ORGBLOCKS_INDENTATION"):
        monkeypatch.delenv(name, raising=False)
    return home
