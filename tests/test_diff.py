import itertools

import pytest

from cqtool.core.diff import (
    AUTO_PROPERTIES,
    apply_delta,
    best_primary_type,
    filter_delta,
    force_replace_diff,
    properties_diff,
    property_name,
    regular_diff,
    values_equal,
)
from cqtool.core.state import ActualState, DesiredState, Policy


def desired(props, policy=Policy.MERGE, path="/content/site"):
    return DesiredState(path=path, properties=props, policy=policy)


def actual(props, path="/content/site"):
    return ActualState(path=path, exists=True, properties=props)


def test_auto_properties_cover_both_namespaces():
    assert len(AUTO_PROPERTIES) == 6
    assert {"jcr:lastModified", "cq:lastModified", "jcr:created"} <= AUTO_PROPERTIES


def test_merge_noop_when_unchanged_ignores_auto_properties():
    d = desired({"title": "Hello"})
    c = actual({"title": "Hello", "jcr:lastModified": "t0"})
    assert properties_diff(d, c) == {}


def test_replace_updates_and_deletes_extras():
    d = desired({"title": "World"}, Policy.REPLACE)
    c = actual({"title": "Hello", "subtitle": "Old"})
    assert properties_diff(d, c) == {"title": "World", "subtitle@Delete": ""}


def test_merge_never_deletes_current_only_keys():
    delta = regular_diff({"a": "1"}, {"a": "0", "b": "2", "c": "3"})
    assert delta == {"a": "1"}


def test_replace_deletion_marker_only_for_absent_keys():
    delta = force_replace_diff({"a": "1", "b": "2"}, {"a": "1", "c": "3"})
    assert delta == {"b": "2", "c@Delete": ""}


def test_protected_properties_filtered_including_deletions():
    d = desired({"title": "x"}, Policy.REPLACE)
    c = actual({"title": "y", "rep:principalName": "admin", "jcr:createdBy": "admin"})
    delta = properties_diff(d, c, frozenset({"rep:principalName"}))
    assert delta == {"title": "x"}


def test_primary_type_stays_editable():
    d = desired({"jcr:primaryType": "sling:Folder"}, Policy.MERGE)
    c = actual({"jcr:primaryType": "nt:unstructured"})
    assert properties_diff(d, c, frozenset({"jcr:mixinTypes"})) == {"jcr:primaryType": "sling:Folder"}


def test_values_compared_in_wire_form():
    d = desired({"hidden": True, "rank": 3})
    c = actual({"hidden": "true", "rank": 3})
    assert properties_diff(d, c) == {}


def test_multi_valued_properties():
    d = desired({"tags": ["a", "b"]})
    assert properties_diff(d, actual({"tags": ["a", "b"]})) == {}
    assert properties_diff(d, actual({"tags": ["a"]})) == {"tags": ["a", "b"]}


def test_single_value_list_equals_scalar():
    for policy in (Policy.MERGE, Policy.REPLACE):
        assert properties_diff(desired({"tags": ["a"]}, policy), actual({"tags": "a"})) == {}
        assert properties_diff(desired({"tags": "a"}, policy), actual({"tags": ["a"]})) == {}
    assert values_equal(None, []) is False
    assert values_equal([], []) is True
    assert values_equal("a", ["a", "b"]) is False


def test_empty_list_converges():
    assert properties_diff(desired({"tags": []}), actual({})) == {"tags": []}
    assert properties_diff(desired({"tags": []}), actual({"tags": []})) == {}


def test_best_primary_type_prefers_desired():
    assert best_primary_type({"jcr:primaryType": "a"}, {"jcr:primaryType": "b"}) == "a"
    assert best_primary_type({}, {"jcr:primaryType": "b"}) == "b"
    assert best_primary_type({}, {}) is None


def test_property_name_strips_delete_suffix():
    assert property_name("title@Delete") == "title"
    assert property_name("title") == "title"


def test_filter_delta_drops_auto_deletions():
    delta = {"cq:lastModified@Delete": "", "jcr:title": "t"}
    assert filter_delta(delta, frozenset()) == {"jcr:title": "t"}


STATES = [
    {},
    {"title": "Hello"},
    {"title": "Hello", "subtitle": "Old", "jcr:lastModified": "t0"},
    {"jcr:primaryType": "nt:unstructured", "secret": "s", "count": "1"},
]
PROTECTED = frozenset({"secret"})


@pytest.mark.parametrize("current,wanted", list(itertools.product(STATES, STATES)))
def test_policy_properties(current, wanted):
    merge = properties_diff(desired(wanted), actual(current), PROTECTED)
    replace = properties_diff(desired(wanted, Policy.REPLACE), actual(current), PROTECTED)

    # additivity: claves solo actuales nunca aparecen en merge
    for key in set(current) - set(wanted):
        assert key not in merge

    # protección: ni clave directa ni @Delete
    for delta in (merge, replace):
        for key in delta:
            name = property_name(key)
            assert name not in AUTO_PROPERTIES
            assert name not in PROTECTED

    # completitud de replace, ignorando automáticas/protegidas
    result = apply_delta(current, replace)
    ignored = AUTO_PROPERTIES | PROTECTED
    assert {k: v for k, v in result.items() if k not in ignored} == \
        {k: v for k, v in wanted.items() if k not in ignored}

    # idempotencia: reaplicar el mismo estado deseado no produce delta
    again = properties_diff(desired(wanted, Policy.REPLACE), actual(result), PROTECTED)
    assert again == {}
