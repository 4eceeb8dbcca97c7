import pytest

from smart_scheduler.core.config.settings import (
    DEFAULT_SETTINGS,
    ENV_CONFIG_PATH,
    SettingsError,
    load_settings,
)


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv(ENV_CONFIG_PATH, raising=False)
    s = load_settings(None)
    assert s == DEFAULT_SETTINGS
    assert s.duplicate_titles == "reject"
    assert (s.min_hours, s.max_hours) == (1, 1000)


def test_settings_file_overrides(tmp_path):
    p = tmp_path / "settings.yaml"
    p.write_text("duplicate_titles: collapse\nmax_hours: 80\n", encoding="utf-8")
    s = load_settings(str(p))
    assert s.duplicate_titles == "collapse"
    assert s.max_hours == 80
    assert s.min_hours == 1


def test_settings_from_environment(monkeypatch, tmp_path):
    p = tmp_path / "settings.yaml"
    p.write_text("duplicate_titles: collapse\n", encoding="utf-8")
    monkeypatch.setenv(ENV_CONFIG_PATH, str(p))
    assert load_settings(None).duplicate_titles == "collapse"


def test_settings_empty_file(tmp_path):
    p = tmp_path / "settings.yaml"
    p.write_text("", encoding="utf-8")
    assert load_settings(str(p)) == DEFAULT_SETTINGS


@pytest.mark.parametrize(
    "text",
    [
        "- not a mapping\n",
        "duplicate_titles: sometimes\n",
        "max_hours: 0\n",
        "min_hours: true\n",
        "min_hours: 10\nmax_hours: 5\n",
        "colour: blue\n",
    ],
)
def test_settings_invalid(tmp_path, text):
    p = tmp_path / "settings.yaml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(SettingsError):
        load_settings(str(p))


def test_settings_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(str(tmp_path / "nope.yaml"))
