from chartc.channeldef import FieldDef
from chartc.core.hashing import hash_spec, json_dumps_canonical, unique


def test_json_dumps_canonical_sorted_and_ascii_policy() -> None:
    obj1 = {"b": 2, "a": 1, "nested": {"y": 2, "x": 1}, "title": "Größe"}
    obj2 = {"nested": {"x": 1, "y": 2}, "a": 1, "title": "Größe", "b": 2}
    s1 = json_dumps_canonical(obj1)
    assert s1 == json_dumps_canonical(obj2)
    assert "Größe" in s1
    assert s1.startswith('{"a":1,"b":2')


def test_hash_spec_order_invariant() -> None:
    a = {"field": "value", "type": "quantitative", "scale": {"zero": False, "type": "log"}}
    b = {"scale": {"type": "log", "zero": False}, "type": "quantitative", "field": "value"}
    assert hash_spec(a) == hash_spec(b)
    assert hash_spec(a) != hash_spec({**a, "field": "other"})


def test_field_def_hashes_like_its_dict_form() -> None:
    fd = FieldDef(field="date", type="T", timeUnit="month")
    assert hash_spec(fd) == hash_spec({"field": "date", "type": "temporal", "timeUnit": "month"})


def test_unique_keeps_first_occurrence_order() -> None:
    items = [{"field": "a"}, {"field": "b"}, {"field": "a"}, {"field": "c"}]
    assert unique(items) == [{"field": "a"}, {"field": "b"}, {"field": "c"}]
