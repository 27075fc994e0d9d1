import pytest

from vitrine.logic.paths import match_key, norm_path, parent_prefixes, to_thumb_site_path


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("bags/Tote", "BAGS/Tote"),
        (" bags\\Tote / Clutch ", "BAGS/Tote/Clutch"),
        ("//hats//", "HATS"),
        ("", ""),
        (None, ""),
        (" / ", ""),
    ],
)
def test_norm_path(raw, expected):
    assert norm_path(raw) == expected


@pytest.mark.parametrize("raw", ["bags/Tote", "Hats\\Cap/ x ", "a//b/c", "ÉTÉ/Robe"])
def test_norm_path_is_idempotent(raw):
    once = norm_path(raw)
    assert norm_path(once) == once


def test_match_key_ignores_case_and_separator():
    assert match_key("Bags\\Tote/") == match_key("BAGS/Tote") == "bags/tote"


def test_parent_prefixes():
    assert parent_prefixes("BAGS/Tote/Clutch") == ["BAGS", "BAGS/Tote"]
    assert parent_prefixes("BAGS") == []
    assert parent_prefixes("") == []


def test_to_thumb_site_path():
    assert to_thumb_site_path("bags.webp") == "/thumbs/bags.webp"
    assert to_thumb_site_path("/thumbs/a\\b.webp") == "/thumbs/a/b.webp"
    assert to_thumb_site_path("") == ""
