"""Unit tests for botsense.security.specificity."""

import pytest

from botsense.security.specificity import specificity_score


@pytest.mark.parametrize(
    "signature, expected",
    [
        (r"GPTBot\/[0-9]", 31),  # 8 literals, version marker, brand
        (r"ChatGPT-User\/[0-9]", 41),  # 13 literals, version marker, brand
        (r"OAI-SearchBot\/[0-9]", 43),
        ("Claude", 22),  # brand, no version marker
        ("bot", -9),  # generic word penalty
        ("BOT", -9),  # generic check is case-insensitive
        ("crawler", -1),
        ("Mozilla.*bot", 14),  # two wildcards
        ("foo?", 3),
        ("", 0),
    ],
)
def test_score_values(signature, expected):
    assert specificity_score(signature) == expected


def test_more_literals_score_higher():
    assert specificity_score("abcdef") > specificity_score("abc")


def test_wildcards_lower_score():
    assert specificity_score("ab.+c") < specificity_score("abc")


def test_version_marker_requires_escaped_form():
    assert specificity_score(r"Foo\/[0-9]") == specificity_score("Foo/[0-9]") + 5


def test_brand_markers_are_case_sensitive():
    # "chatgpt" lowercase is not a brand marker
    assert specificity_score("chatgpt") == 14
    assert specificity_score("ChatGPT") == 24


def test_brand_bonus_applies_once():
    # Contains both "GPTBot" and "ChatGPT"
    assert specificity_score("ChatGPTBot") == 20 + 10


def test_generic_penalty_only_for_whole_signature():
    assert specificity_score("bots") == 8
    assert specificity_score("spider") == 12 - 15
