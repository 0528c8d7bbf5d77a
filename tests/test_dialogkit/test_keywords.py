from unittest.mock import MagicMock
from dialogkit.keywords import KeywordSubstitution, find_span

def test_find_span():
    assert find_span("no keywords") is None
    assert find_span("a <<b>> c") == (2, 7)
    assert find_span("a >> b <<c") is None
    assert find_span(">> then <<x>>") == (8, 13)

def test_replaces_known_keys():
    sub = KeywordSubstitution({"player": "Ada", "town": "Lowmere"}.get)

    assert sub.replace("Hi <<player>>, welcome to <<town>>.") == "Hi Ada, welcome to Lowmere."

def test_unknown_keys_become_empty():
    sub = KeywordSubstitution(lambda key: None)

    assert sub.replace("a<<missing>>b") == "ab"

def test_text_without_keywords_is_unchanged():
    resolver = MagicMock(return_value="x")
    sub = KeywordSubstitution(resolver)

    assert sub.replace("plain text") == "plain text"
    assert sub.replace("") == ""
    resolver.assert_not_called()

def test_unclosed_span_is_left_alone():
    sub = KeywordSubstitution(lambda key: "x")

    assert sub.replace("a << b") == "a << b"

def test_recursive_expansion():
    table = {"greeting": "Hello <<name>>", "name": "<<first>> <<last>>", "first": "Ada", "last": "L."}
    sub = KeywordSubstitution(table.get)

    assert sub.replace("<<greeting>>!") == "Hello Ada L.!"

def test_each_key_resolved_once_per_call():
    resolver = MagicMock(return_value="Ada")
    sub = KeywordSubstitution(resolver)

    assert sub.replace("<<player>> and <<player>> and <<player>>") == "Ada and Ada and Ada"
    resolver.assert_called_once_with("player")

def test_cycle_stops_at_limit(caplog):
    sub = KeywordSubstitution({"loop": "<<loop>>"}.get, limit=10)

    result = sub.replace("<<loop>>")

    assert result == "<<loop>>"
    assert "expansion limit" in caplog.text
