import pytest

from agentkit.stringext import capitalize, contains_any


def test_capitalize_words():
    assert capitalize("hello world") == "Hello World"


def test_capitalize_lowers_rest_of_word():
    assert capitalize("HELLO") == "Hello"


def test_capitalize_keeps_apostrophe_words_together():
    assert capitalize("don't stop") == "Don't Stop"


@pytest.mark.parametrize("text", ["some TEXT here", "a-b c_d", "", "x"])
def test_capitalize_is_idempotent(text):
    once = capitalize(text)
    assert capitalize(once) == once


def test_capitalize_preserves_length():
    text = "mixed CASE words, with punctuation!"
    assert len(capitalize(text)) == len(text)


def test_contains_any_true_when_one_matches():
    assert contains_any("hello world", "xyz", "wor")


def test_contains_any_false_when_none_match():
    assert not contains_any("hello world", "xyz", "abc")


def test_contains_any_without_candidates():
    assert not contains_any("hello")