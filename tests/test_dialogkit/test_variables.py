import json
from dialogkit.variables import VariableStore

def test_add_does_not_overwrite(variables):
    assert variables.add("gold", "5")
    assert not variables.add("gold", "9")
    assert variables.get("gold") == "5"

def test_set_creates_and_replaces(variables):
    variables.set("a", "1")
    variables.set("b", "2")
    variables.set("a", "3")

    assert variables.get("a") == "3"
    # Replacing keeps the original position
    assert list(variables) == ["a", "b"]

def test_get_missing(variables):
    assert variables.get("nope") is None
    assert variables.try_get("nope") == (False, "")

def test_values_are_strings(variables):
    variables.set("n", 5)

    assert variables.get("n") == "5"

def test_contains_remove_clear(variables):
    variables.set("a", "1")

    assert "a" in variables
    assert variables.contains("a")
    assert len(variables) == 1

    assert variables.remove("a")
    assert not variables.remove("a")

    variables.set("b", "2")
    variables.clear()
    assert len(variables) == 0

def test_seed_from_mapping():
    store = VariableStore({"gold": "10", "name": "Ada"})

    assert store.to_dict() == {"gold": "10", "name": "Ada"}

def test_increment_count(variables):
    variables.increment_count("guard")
    assert variables.get("guard") == "1"

    variables.increment_count("guard")
    assert variables.get_count("guard") == 2

def test_increment_count_leaves_non_integers(variables):
    variables.set("guard", "many")
    variables.increment_count("guard")

    assert variables.get("guard") == "many"
    assert variables.get_count("guard") == 0

def test_json_export_format(variables):
    variables.set("gold", "10")
    variables.set("met", "true")

    data = json.loads(variables.export_json())

    assert data == {"vars": [{"key": "gold", "value": "10"}, {"key": "met", "value": "true"}]}

def test_json_import_merges(variables):
    variables.set("gold", "1")
    variables.set("keep", "x")

    ok = variables.import_json('{"vars": [{"key": "gold", "value": "7"}, {"key": "new", "value": "y"}]}')

    assert ok
    assert variables.to_dict() == {"gold": "7", "keep": "x", "new": "y"}

def test_json_import_rejects_garbage(variables):
    variables.set("gold", "1")

    assert not variables.import_json("not json")
    assert not variables.import_json('{"vars": [{"key": 1, "value": []}]}')
    assert variables.to_dict() == {"gold": "1"}

def test_text_export_and_custom_delimiters(variables):
    variables.set("a", "1")
    variables.set("b", "2")

    assert variables.export_text() == "a=1,b=2"
    assert variables.export_text(";", ":") == "a:1;b:2"

def test_text_import(variables):
    assert variables.import_text("a=1, b = 2")
    assert variables.to_dict() == {"a": "1", "b": "2"}

    assert variables.import_text("c:3|d:4", "|", ":")
    assert variables.get("d") == "4"

def test_text_import_is_all_or_nothing(variables):
    assert not variables.import_text("a=1,broken,c=3")
    assert len(variables) == 0

def test_text_import_empty_string(variables):
    assert variables.import_text("")
    assert len(variables) == 0

def test_from_json_file(tmp_path):
    path = tmp_path / "vars.json"
    path.write_text('{"vars": [{"key": "gold", "value": "3"}]}')

    store = VariableStore.from_json_file(path)

    assert store.get("gold") == "3"
