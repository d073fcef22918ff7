"""
Tests for attendee normalization and vote weighting.
"""
import pytest

from madness.utils.attendees import EVERYONE, NAMED, NOBODY, parse_attendees, vote_weight


@pytest.mark.parametrize("raw", [True, "true", " TRUE "])
def test_boolean_true_means_everyone(raw):
    parsed = parse_attendees(raw)
    assert parsed.kind == EVERYONE
    assert parsed.includes("Anyone")


@pytest.mark.parametrize("raw", [False, "false", None, ""])
def test_boolean_false_means_nobody(raw):
    parsed = parse_attendees(raw)
    assert parsed.kind == NOBODY
    assert not parsed.includes("Paul Morse")


def test_list_of_names():
    parsed = parse_attendees(["Paul Morse", " JJ Greco ", None, ""])
    assert parsed.kind == NAMED
    assert parsed.names == frozenset({"Paul Morse", "JJ Greco"})


def test_json_array_string():
    parsed = parse_attendees('["Paul Morse", "Job Gregory"]')
    assert parsed.names == frozenset({"Paul Morse", "Job Gregory"})


def test_delimited_string_with_commas_and_pipes():
    parsed = parse_attendees("Paul Morse, Job Gregory | JJ Greco")
    assert parsed.names == frozenset({"Paul Morse", "Job Gregory", "JJ Greco"})


def test_broken_json_falls_back_to_delimited():
    parsed = parse_attendees("[Paul Morse, JJ Greco]")
    assert parsed.kind == NAMED
    assert parsed.names == frozenset({"Paul Morse", "JJ Greco"})


def test_python_style_list_string():
    parsed = parse_attendees("['Paul Morse', 'JJ Greco']")
    assert parsed.names == frozenset({"Paul Morse", "JJ Greco"})
    assert vote_weight("['Paul Morse', 'JJ Greco']", "JJ Greco") == 1.0
    assert vote_weight("[Paul Morse, JJ Greco]", "Paul Morse") == 1.0


def test_name_match_is_case_insensitive():
    assert parse_attendees("paul morse").includes("Paul Morse")


def test_vote_weight():
    assert vote_weight("Paul Morse|JJ Greco", "JJ Greco") == 1.0
    assert vote_weight("Paul Morse|JJ Greco", "Andrew King") == 0.5
    assert vote_weight("true", "Andrew King") == 1.0
    assert vote_weight(None, "Andrew King") == 0.5
