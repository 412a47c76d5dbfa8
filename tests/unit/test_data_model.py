"""Data model store tests."""

import pytest
from hypothesis import given, strategies as st

from a2ui.errors import BindingError, InvalidPath
from a2ui.runtime import DataModelStore, join_path, normalize_path, split_path


scalars = st.one_of(
    st.text(max_size=20),
    st.integers(min_value=-10**6, max_value=10**6),
    st.booleans(),
    st.floats(allow_nan=False, allow_infinity=False),
)
keys = st.text(alphabet="abcdefgh", min_size=1, max_size=4)
nodes = st.recursive(
    scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=4),
        st.dictionaries(keys, children, max_size=4),
    ),
    max_leaves=12,
)
maps = st.dictionaries(keys, nodes, max_size=5)


# ============================================================================
# Paths
# ============================================================================

@pytest.mark.unit
def test_split_path_unescapes_segments():
    """Test JSON-pointer escapes."""
    assert split_path("/a~1b/c~0d") == ["a/b", "c~d"]
    assert split_path("/") == []
    assert split_path("") == []


@pytest.mark.unit
def test_join_and_normalize():
    """Test path joining and canonical form."""
    assert join_path("/items", 0, "name") == "/items/0/name"
    assert join_path("/", "a/b") == "/a~1b"
    assert normalize_path("user//name/") == "/user/name"


# ============================================================================
# Reads
# ============================================================================

@pytest.mark.unit
def test_get_missing_is_none(store):
    """Test NotFound reads."""
    assert store.get("/nothing") is None
    store.merge("/user", {"name": "Alice"})
    assert store.get("/user/name/first") is None  # through a scalar
    assert store.get("/user/age") is None


@pytest.mark.unit
def test_get_returns_copy(store):
    """Test reads never expose internal state."""
    store.merge("/user", {"tags": ["a"]})
    tags = store.get("/user/tags")
    tags.append("b")
    assert store.get("/user/tags") == ["a"]


@pytest.mark.unit
def test_get_array_element(store):
    """Test numeric segments index arrays."""
    store.merge("/items", [{"n": 1}, {"n": 2}])
    assert store.get("/items/1/n") == 2
    assert store.get("/items/2") is None
    assert store.get("/items/x") is None


# ============================================================================
# Merge rule
# ============================================================================

@pytest.mark.unit
def test_map_merge_preserves_existing_keys(store):
    """Test {a:1} then {b:2} gives {a:1, b:2}."""
    store.merge("/p", {"a": 1})
    store.merge("/p", {"b": 2})
    assert store.get("/p") == {"a": 1, "b": 2}


@pytest.mark.unit
def test_scalar_replaces_map(store):
    """Test a scalar replaces a whole subtree."""
    store.merge("/p", {"a": 1})
    store.merge("/p", 7)
    assert store.get("/p") == 7


@pytest.mark.unit
def test_array_replaces_not_merges(store):
    """Test arrays are replaced wholesale."""
    store.merge("/items", [1, 2, 3, 4, 5])
    store.merge("/items", [9])
    assert store.get("/items") == [9]


@pytest.mark.unit
def test_nested_map_merge(store):
    """Test recursive merge leaves siblings alone."""
    store.merge("/", {"user": {"name": "Alice", "address": {"city": "Oslo"}}})
    store.merge("/", {"user": {"address": {"zip": "0150"}}})
    assert store.get("/user") == {"name": "Alice", "address": {"city": "Oslo", "zip": "0150"}}


@pytest.mark.unit
def test_merge_returns_previous(store):
    """Test previous node is returned."""
    assert store.merge("/count", 1) is None
    assert store.merge("/count", 2) == 1


@pytest.mark.unit
def test_creates_intermediate_containers(store):
    """Test missing containers are created by the next segment's kind."""
    store.merge("/a/b/c", "x")
    store.merge("/list/0/name", "first")
    assert store.to_dict() == {"a": {"b": {"c": "x"}}, "list": [{"name": "first"}]}


@pytest.mark.unit
def test_array_append_at_length(store):
    """Test writing at len appends."""
    store.merge("/items", ["a"])
    store.merge("/items/1", "b")
    assert store.get("/items") == ["a", "b"]


@pytest.mark.unit
def test_array_past_end_rejected(store):
    """Test writes beyond len are invalid."""
    store.merge("/items", ["a"])
    with pytest.raises(InvalidPath):
        store.merge("/items/5", "z")
    assert store.get("/items") == ["a"]


@pytest.mark.unit
def test_traversing_scalar_rejected(store):
    """Test a scalar cannot be used as a container."""
    store.merge("/name", "Alice")
    with pytest.raises(InvalidPath) as exc:
        store.merge("/name/first", "A")
    assert exc.value.path == "/name/first"
    assert store.get("/name") == "Alice"


@pytest.mark.unit
def test_failed_write_leaves_no_partial_containers(store):
    """Test intermediates created before a failure are rolled back."""
    store.merge("/items", [])
    with pytest.raises(InvalidPath):
        store.merge("/fresh/items/x/3", 1)
    assert store.get("/fresh") is None


@pytest.mark.unit
def test_root_must_be_map(store):
    """Test a non-map at the root is rejected."""
    with pytest.raises(InvalidPath):
        store.merge("/", [1, 2])
    store.merge("/", {"a": 1})
    assert store.get("/") == {"a": 1}


@pytest.mark.unit
def test_unsupported_value_type(store):
    """Test non-data values are rejected."""
    with pytest.raises(BindingError):
        store.merge("/when", object())
    with pytest.raises(BindingError):
        store.merge("/m", {1: "x"})


# ============================================================================
# Change tracking
# ============================================================================

@pytest.mark.unit
def test_changed_paths_include_ancestors(store):
    """Test written path and every ancestor are reported."""
    store.merge("/user/name", "Alice")
    assert store.drain_changes() == {"/", "/user", "/user/name"}
    assert store.drain_changes() == set()


@pytest.mark.unit
def test_map_merge_reports_descendants(store):
    """Test map merges report each written key."""
    store.merge("/user", {"id": 1})
    store.drain_changes()
    store.merge("/user", {"name": "A", "age": 3})
    assert {"/user/name", "/user/age"} <= store.changed_paths


@pytest.mark.unit
def test_is_dirty(store):
    """Test overlap check for descendants and ancestors."""
    store.merge("/user", {"name": "A"})
    store.drain_changes()
    store.merge("/user", 5)
    assert store.is_dirty("/user")
    assert store.is_dirty("/user/name")  # replaced subtree
    assert store.is_dirty("/")
    assert not store.is_dirty("/other")


@pytest.mark.unit
def test_version_counts_merges(store):
    """Test version increments once per successful merge."""
    store.merge("/a", 1)
    with pytest.raises(InvalidPath):
        store.merge("/a/b", 2)
    assert store.version == 1


# ============================================================================
# Transactions
# ============================================================================

@pytest.mark.unit
def test_transaction_rolls_back(store):
    """Test a failing batch restores the prior state."""
    store.merge("/name", "Alice")
    store.drain_changes()
    with pytest.raises(InvalidPath):
        with store.transaction():
            store.merge("/age", 30)
            store.merge("/name/first", "A")
    assert store.to_dict() == {"name": "Alice"}
    assert store.version == 1
    assert store.changed_paths == frozenset()


@pytest.mark.unit
def test_transaction_commits(store):
    """Test a successful batch keeps every write."""
    with store.transaction():
        store.merge("/a", 1)
        store.merge("/b", 2)
    assert store.to_dict() == {"a": 1, "b": 2}


# ============================================================================
# Properties
# ============================================================================

@given(maps, keys, nodes)
def test_merge_is_idempotent(initial, key, value):
    """Property test: merging the same value twice equals merging once."""
    once = DataModelStore()
    once.merge("/", initial)
    once.merge(f"/{key}", value)

    twice = DataModelStore()
    twice.merge("/", initial)
    twice.merge(f"/{key}", value)
    twice.merge(f"/{key}", value)

    assert once.to_dict() == twice.to_dict()


@given(maps, maps)
def test_map_merge_keeps_untouched_keys(first, second):
    """Property test: keys absent from the second map survive the merge."""
    store = DataModelStore()
    store.merge("/p", first)
    store.merge("/p", second)
    result = store.get("/p")
    for key, value in first.items():
        if key not in second:
            assert result[key] == value
    for key, value in second.items():
        if not isinstance(value, dict):
            assert result[key] == value


@given(st.dictionaries(keys, scalars, min_size=1), scalars)
def test_scalar_over_map_replaces(first, scalar):
    """Property test: a scalar written over a map replaces it."""
    store = DataModelStore()
    store.merge("/p", first)
    store.merge("/p", scalar)
    assert store.get("/p") == scalar
