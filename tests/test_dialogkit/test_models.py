import json
import pytest
from pydantic import ValidationError
from dialogkit.models import (
    DialogData, NodeData, LineData, ResponseData, VarData, QueryData, InlineImage,
)

def test_empty_dialog():
    assert DialogData().is_empty
    assert not DialogData(start="a").is_empty
    assert not DialogData(window_type="box").is_empty
    assert not DialogData(nodes=[NodeData(name="a")]).is_empty

def test_line_defaults():
    line = LineData()

    assert line.set_var == VarData()
    assert line.query.responses == []
    assert line.is_silent
    assert not line.has_condition

def test_has_condition():
    assert LineData(if_var="a=b").has_condition
    assert LineData(if_function="F").has_condition
    assert LineData(if_dialog_count=">1").has_condition
    assert LineData(query=QueryData(text="?", responses=[ResponseData(text="y")])).has_condition
    # A query with no options is not a query
    assert not LineData(query=QueryData(text="?")).has_condition

def test_get_node_and_start_node():
    dialog = DialogData(start="b", nodes=[NodeData(name="a"), NodeData(name="b")])

    assert dialog.get_node("a").name == "a"
    assert dialog.get_node("missing") is None
    assert dialog.get_node("") is None
    assert dialog.get_start_node().name == "b"

    dialog.start = "missing"
    assert dialog.get_start_node().name == "a"

    assert DialogData().get_start_node() is None

def test_json_uses_camel_case():
    dialog = DialogData(
        window_type="box",
        nodes=[NodeData(name="a", lines=[
            LineData(if_var="k=v", set_var=VarData(key="k", value="1"), end_if=True),
        ])],
    )

    data = json.loads(dialog.to_json())

    assert data["windowType"] == "box"
    line = data["nodes"][0]["lines"][0]
    assert line["ifVar"] == "k=v"
    assert line["setVar"] == {"key": "k", "value": "1"}
    assert line["endIf"] is True
    # Defaults are omitted
    assert "speaker" not in line

def test_from_json_accepts_wire_names():
    text = json.dumps({
        "start": "a",
        "nodes": [{"name": "a", "lines": [
            {"speaker": "S", "text": "hi", "ifDialogCount": ">2", "callFunction": "F::x",
             "responses": [{"text": "ok", "link": "b"}]},
        ]}],
    })

    dialog = DialogData.from_json(text)
    line = dialog.nodes[0].lines[0]

    assert line.if_dialog_count == ">2"
    assert line.call_function == "F::x"
    assert line.responses[0].link == "b"

def test_unknown_fields_are_rejected():
    with pytest.raises(ValidationError):
        DialogData.from_dict({"nodes": [], "actors": []})

def test_to_dict_round_trip():
    dialog = DialogData(start="a", nodes=[NodeData(name="a", lines=[LineData(text="x", exit=True)])])

    assert DialogData.from_dict(dialog.to_dict()) == dialog

def test_clone_is_deep():
    dialog = DialogData(nodes=[NodeData(name="a")])
    copy = dialog.clone()
    copy.nodes[0].name = "b"

    assert dialog.nodes[0].name == "a"

def test_inline_image_scale_must_be_positive():
    assert InlineImage(text_to_replace=":coin:", image="coin.png").scale == 1.0
    with pytest.raises(ValidationError):
        InlineImage(scale=0)
