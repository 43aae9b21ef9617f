from canopy.data import MERGED_KEYS, merge_arrays, merge_data, merge_objects


def test_scalar_keys_override_parent():
    parent = {"title": "Site", "layout": "base"}
    own = {"title": "Post"}
    data = merge_data(parent, own)
    assert data == {"title": "Post", "layout": "base"}


def test_inputs_are_not_modified():
    parent = {"tags": ["a"], MERGED_KEYS: {"tags": "array"}}
    own = {"tags": ["b"]}
    merge_data(parent, own)
    assert parent == {"tags": ["a"], MERGED_KEYS: {"tags": "array"}}
    assert own == {"tags": ["b"]}


def test_string_array_concatenates_parent_first_and_dedupes():
    parent = {"tags": ["a"], MERGED_KEYS: {"tags": "stringArray"}}
    own = {"tags": ["a", "b"]}
    assert merge_data(parent, own)["tags"] == ["a", "b"]


def test_string_array_coerces_items():
    parent = {"ids": [1, 2], MERGED_KEYS: {"ids": "stringArray"}}
    own = {"ids": ["2", 3]}
    assert merge_data(parent, own)["ids"] == ["1", "2", "3"]


def test_array_keeps_item_types_and_handles_unhashable_items():
    parent = {"links": [{"href": "/"}], MERGED_KEYS: {"links": "array"}}
    own = {"links": [{"href": "/"}, {"href": "/about"}]}
    assert merge_data(parent, own)["links"] == [{"href": "/"}, {"href": "/about"}]


def test_array_wraps_scalars_and_skips_none():
    assert merge_arrays("a", ["b"]) == ["a", "b"]
    assert merge_arrays(None, "b") == ["b"]
    assert merge_arrays(None, None) == []


def test_object_shallow_merge_own_wins():
    parent = {"meta": {"author": "Ann", "lang": "en"}, MERGED_KEYS: {"meta": "object"}}
    own = {"meta": {"lang": "fr"}}
    assert merge_data(parent, own)["meta"] == {"author": "Ann", "lang": "fr"}


def test_object_merge_ignores_non_mappings():
    assert merge_objects("oops", {"a": 1}) == {"a": 1}
    assert merge_objects({"a": 1}, None) == {"a": 1}


def test_merged_keys_are_the_union_of_declarations():
    parent = {MERGED_KEYS: {"tags": "stringArray"}, "tags": ["x"]}
    own = {MERGED_KEYS: {"meta": "object"}, "meta": {"a": 1}}
    data = merge_data(parent, own)
    assert data[MERGED_KEYS] == {"tags": "stringArray", "meta": "object"}
    assert data["tags"] == ["x"]
    assert data["meta"] == {"a": 1}


def test_own_declaration_changes_strategy_for_its_subtree():
    parent = {MERGED_KEYS: {"tags": "array"}, "tags": [1]}
    own = {MERGED_KEYS: {"tags": "stringArray"}, "tags": [1]}
    assert merge_data(parent, own)["tags"] == ["1"]


def test_declared_key_absent_on_both_sides_stays_absent():
    data = merge_data({MERGED_KEYS: {"tags": "array"}}, {"title": "x"})
    assert "tags" not in data


def test_unknown_strategy_falls_back_to_override():
    parent = {MERGED_KEYS: {"tags": "mystery"}, "tags": ["a"]}
    own = {"tags": ["b"]}
    assert merge_data(parent, own)["tags"] == ["b"]


def test_no_merged_keys_means_no_declaration_in_result():
    assert MERGED_KEYS not in merge_data({"a": 1}, {"b": 2})
