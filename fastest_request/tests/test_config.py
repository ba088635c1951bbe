import sys
from pathlib import Path

import pytest

# Ensure package path for local src
ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "fastest_request" / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from fastest_request import config


@pytest.mark.parametrize("value", ["", "   ", ",", " ; , "])
def test_provider_list_without_entries_falls_back_to_defaults(monkeypatch, value):
    monkeypatch.setenv("FR_PROVIDER_URLS", value)
    assert config._env_list("FR_PROVIDER_URLS", config.DEFAULT_PROVIDER_URLS) == config.DEFAULT_PROVIDER_URLS


def test_provider_list_splits_on_commas_and_semicolons(monkeypatch):
    monkeypatch.setenv("FR_PROVIDER_URLS", "http://a.test/{id} ; http://b.test/{id},")
    assert config._env_list("FR_PROVIDER_URLS", ()) == ("http://a.test/{id}", "http://b.test/{id}")


def test_unset_provider_list_uses_default(monkeypatch):
    monkeypatch.delenv("FR_PROVIDER_URLS", raising=False)
    assert config._env_list("FR_PROVIDER_URLS", ("x",)) == ("x",)


def test_env_bool_and_int(monkeypatch):
    monkeypatch.setenv("FR_FAIL_ON_HTTP_ERROR", "yes")
    monkeypatch.setenv("FR_PORT", "9090")
    assert config._env_bool("FR_FAIL_ON_HTTP_ERROR", False) is True
    assert config._env_int("FR_PORT", 8080) == 9090
