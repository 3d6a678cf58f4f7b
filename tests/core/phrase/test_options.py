from __future__ import annotations

import pytest

from core.phrase.options import ReadOptions, WriteOptions, is_enabled


@pytest.mark.parametrize(
    ("value", "expected"),
    [("1", True), ("true", True), ("On", True), (True, True), ("0", False), ("", False), (None, False), (False, False)],
)
def test_is_enabled(value: object, expected: bool) -> None:
    assert is_enabled(value) is expected


def test_read_options_defaults() -> None:
    options = ReadOptions.from_config()
    assert options.get_options() == {
        "file_format": "symfony_xliff",
        "include_empty_translations": "1",
        "tags": [],
        "format_options": {"enclose_in_cdata": "1"},
    }
    assert options.is_fallback_locale_enabled() is False


def test_read_options_ignore_protected_keys_and_merge_format_options() -> None:
    options = ReadOptions.from_config(
        {
            "file_format": "json",
            "tags": "other",
            "tag": "other",
            "fallback_locale_id": "xx",
            "encoding": "UTF-8",
            "format_options": {"convert_placeholder": True},
        }
    )
    result = options.get_options()
    assert result["file_format"] == "symfony_xliff"
    assert result["tags"] == []
    assert "tag" not in result
    assert "fallback_locale_id" not in result
    assert result["encoding"] == "UTF-8"
    assert result["format_options"] == {"enclose_in_cdata": "1", "convert_placeholder": "1"}


def test_fallback_forces_include_empty_translations() -> None:
    options = ReadOptions.from_config({"fallback_locale_enabled": True, "include_empty_translations": "0"})
    assert options.is_fallback_locale_enabled() is True
    assert options.get_options()["include_empty_translations"] == "1"


def test_include_empty_translations_can_be_disabled_without_fallback() -> None:
    options = ReadOptions.from_config({"include_empty_translations": False})
    assert options.get_options()["include_empty_translations"] == "0"


def test_with_methods_return_new_instances() -> None:
    base = ReadOptions.from_config({"fallback_locale_enabled": "1"})
    tagged = base.with_tag("messages")
    with_fallback = tagged.with_fallback_locale("de")

    assert base.get_options()["tags"] == []
    assert tagged.get_options()["tags"] == "messages"
    assert "fallback_locale_id" not in tagged.get_options()
    assert with_fallback.get_options()["fallback_locale_id"] == "de"
    assert with_fallback.is_fallback_locale_enabled() is True


def test_get_options_returns_a_copy() -> None:
    options = ReadOptions.from_config()
    copied = options.get_options()
    copied["format_options"]["enclose_in_cdata"] = "0"
    assert options.get_options()["format_options"]["enclose_in_cdata"] == "1"


def test_write_options_defaults_and_protection() -> None:
    options = WriteOptions.from_config({"file_format": "json", "locale_id": "x", "file": "f", "skip_upload_tags": True})
    assert options.get_options() == {
        "file_format": "symfony_xliff",
        "update_translations": "1",
        "skip_upload_tags": "1",
    }


def test_write_options_with_locale_and_tag() -> None:
    base = WriteOptions.from_config()
    options = base.with_tag("messages").with_locale("abc")
    assert options.get_options() == {
        "file_format": "symfony_xliff",
        "update_translations": "1",
        "tags": "messages",
        "locale_id": "abc",
    }
    assert base == WriteOptions.from_config()
    assert options != base
