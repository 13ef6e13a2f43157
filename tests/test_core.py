from depparse.core import (
    Dependency,
    Library,
    Location,
    merge_maps,
    unique_libraries,
    unique_strings,
)


def test_unique_libraries_merges_locations_of_duplicates():
    first = Library(name="pkg", version="1.0", locations=[Location(5, 6)])
    second = Library(name="pkg", version="1.0", locations=[Location(1, 2)])
    result = unique_libraries([first, second])
    assert [lib.name for lib in result] == ["pkg"]
    assert result[0].locations == (Location(1, 2), Location(5, 6))


def test_unique_libraries_keeps_distinct_versions_sorted():
    libs = [
        Library(id="b@2", name="b", version="2"),
        Library(id="a@1", name="a", version="1"),
        Library(id="b@2", name="b", version="2"),
        Library(id="a@3", name="a", version="3"),
    ]
    result = unique_libraries(libs)
    assert [lib.id for lib in result] == ["a@1", "a@3", "b@2"]


def test_unique_libraries_of_nothing_is_empty():
    assert unique_libraries([]) == []


def test_unique_strings_keeps_first_order():
    assert unique_strings(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


def test_merge_maps_child_overrides_parent_without_mutation():
    parent = {"a": "1", "b": "2"}
    child = {"b": "3"}
    assert merge_maps(parent, child) == {"a": "1", "b": "3"}
    assert parent == {"a": "1", "b": "2"}


def test_merge_maps_accepts_missing_sides():
    assert merge_maps(None, {"x": "y"}) == {"x": "y"}
    assert merge_maps({"x": "y"}, None) == {"x": "y"}


def test_library_sequences_become_tuples_and_hash():
    lib = Library(name="n", version="v", locations=[Location(3, 4)])
    assert lib.locations == (Location(3, 4),)
    assert {lib, Library(name="n", version="v", locations=(Location(3, 4),))} == {lib}


def test_dependency_depends_on_is_tuple():
    dep = Dependency("root", ["a", "b"])
    assert dep.depends_on == ("a", "b")