"""Tests for reading settings and the settings stores."""

import json

import pytest

from readwell_core.errors import SettingsError
from readwell_core.settings import DEFAULT_SETTINGS, ReadingSettings, is_night_hour
from readwell_core.storage import JsonSettingsStore, MemorySettingsStore


class TestReadingSettings:
    """Test parsing and validation."""

    def test_defaults(self):
        s = ReadingSettings()
        assert s.font_size == 16
        assert s.line_height == 1.6
        assert s.max_width == 800
        assert s.content_align == "center"
        assert s.enable_ad_block is True
        assert s.dark_mode is False

    def test_camel_and_snake_keys(self):
        s = ReadingSettings.from_mapping({"fontSize": 20, "text_color": "#000000"})
        assert s.font_size == 20
        assert s.text_color == "#000000"

    def test_invalid_field_falls_back_alone(self):
        s = ReadingSettings.from_mapping({
            "fontSize": "huge",
            "opacity": 3,
            "contentAlign": "diagonal",
            "darkMode": "yes",
            "lineHeight": 2.0,
        })
        assert s.font_size == DEFAULT_SETTINGS.font_size
        assert s.opacity == DEFAULT_SETTINGS.opacity
        assert s.content_align == DEFAULT_SETTINGS.content_align
        assert s.dark_mode is False
        assert s.line_height == 2.0

    def test_numeric_strings_accepted(self):
        s = ReadingSettings.from_mapping({"fontSize": "18px", "letterSpacing": "0.5"})
        assert s.font_size == 18
        assert s.letter_spacing == 0.5

    def test_strict_raises(self):
        with pytest.raises(SettingsError):
            ReadingSettings.from_mapping({"fontSize": "huge"}, strict=True)
        with pytest.raises(SettingsError):
            ReadingSettings.from_mapping(["not", "a", "mapping"], strict=True)

    def test_non_mapping_lenient_gives_defaults(self):
        assert ReadingSettings.from_mapping("garbage") == DEFAULT_SETTINGS
        assert ReadingSettings.from_mapping(None) == DEFAULT_SETTINGS

    def test_font_family_cannot_break_out(self):
        s = ReadingSettings.from_mapping({"fontFamily": "x; } body { display: none"})
        assert s.font_family == DEFAULT_SETTINGS.font_family

    def test_to_dict_roundtrip(self):
        s = ReadingSettings(font_size=22, dark_mode=True, link_color="rgb(0, 0, 255)")
        assert ReadingSettings.from_mapping(s.to_dict(), strict=True) == s
        assert "fontSize" in s.to_dict()

    def test_replace_validates(self):
        assert DEFAULT_SETTINGS.replace(font_size=18).font_size == 18
        with pytest.raises(SettingsError):
            DEFAULT_SETTINGS.replace(font_size=-1)
        with pytest.raises(SettingsError):
            DEFAULT_SETTINGS.replace(no_such_setting=1)

    def test_presets(self):
        dark = DEFAULT_SETTINGS.with_preset("dark")
        assert dark.dark_mode is True
        assert dark.background_color == "#1a1a1a"
        sepia = DEFAULT_SETTINGS.with_preset("sepia")
        assert sepia.eye_care_mode is True
        with pytest.raises(SettingsError):
            DEFAULT_SETTINGS.with_preset("neon")


class TestAutoNight:
    @pytest.mark.parametrize("hour,expected", [(0, True), (5, True), (6, False), (12, False), (17, False), (18, True), (23, True)])
    def test_is_night_hour(self, hour, expected):
        assert is_night_hour(hour) is expected

    def test_resolve(self):
        auto = ReadingSettings(auto_night_mode=True)
        assert auto.resolve_auto_night(20).dark_mode is True
        assert auto.resolve_auto_night(10) is auto
        manual = ReadingSettings(auto_night_mode=False)
        assert manual.resolve_auto_night(20) is manual


class TestJsonSettingsStore:
    """Test the file-backed store."""

    def test_missing_file_gives_defaults(self, tmp_path):
        assert JsonSettingsStore(tmp_path / "settings.json").get() == DEFAULT_SETTINGS

    def test_set_then_get(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        custom = ReadingSettings(font_size=21, line_height=1.8, selection_color="#ffee00", focus_mode=True)
        assert JsonSettingsStore(path).set(custom) is True
        assert JsonSettingsStore(path).get() == custom
        assert json.loads(path.read_text())["fontSize"] == 21

    def test_corrupt_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        assert JsonSettingsStore(path).get() == DEFAULT_SETTINGS

    def test_partially_invalid_record_is_not_merged(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"fontSize": 30, "textColor": 12}))
        assert JsonSettingsStore(path).get() == DEFAULT_SETTINGS

    def test_failed_write(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = JsonSettingsStore(blocker / "settings.json")
        assert store.set(ReadingSettings(font_size=30)) is False
        assert store.get() == DEFAULT_SETTINGS


class TestMemorySettingsStore:
    def test_roundtrip(self):
        store = MemorySettingsStore()
        custom = ReadingSettings(opacity=0.8)
        assert store.set(custom) is True
        assert store.get() == custom

    def test_failing_store_keeps_previous(self):
        store = MemorySettingsStore(fail_writes=True)
        assert store.set(ReadingSettings(opacity=0.8)) is False
        assert store.get() == DEFAULT_SETTINGS
