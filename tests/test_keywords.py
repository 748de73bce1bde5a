"""Tests for the keyword fallback classifier."""

import pytest

from conotate.classification.keywords import classify_by_keyword, has_task_keyword


@pytest.mark.parametrize(
    "text",
    ["buy milk", "Call mom tonight", "need to renew passport", "Don't forget the keys"],
)
def test_task_language(text):
    assert classify_by_keyword(text) == "tasks"


@pytest.mark.parametrize(
    "text",
    ["what if cats could fly", "I wonder about tidal energy", "brainstorm: podcast names"],
)
def test_idea_language(text):
    assert classify_by_keyword(text) == "ideas"


def test_creative_word_is_an_idea():
    assert classify_by_keyword("robot butler") == "ideas"
    assert classify_by_keyword("flying car") == "ideas"


def test_task_beats_creative_word():
    assert classify_by_keyword("fix the robot") == "tasks"


def test_task_keywords_match_whole_words():
    # "get" inside "forgettable" and "do" inside "doughnut" are not task verbs
    assert not has_task_keyword("forgettable doughnut")
    assert has_task_keyword("get doughnut")


@pytest.mark.parametrize("text", ["banana", "zidwudd adhcfsbjhd", "", "   "])
def test_unmatched_is_unsorted(text):
    assert classify_by_keyword(text) == "unsorted"


def test_is_deterministic():
    texts = ["buy milk", "what if", "banana", "robot butler"]
    first = [classify_by_keyword(t) for t in texts]
    for _ in range(3):
        assert [classify_by_keyword(t) for t in texts] == first
