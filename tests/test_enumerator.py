import requests

from resource_migrator.logic.enumerator import (ALL_INDICES_PATH, DEFAULT_EXCLUDED_SUBSTRINGS, apply_exclusions,
                                                list_all_indices, list_index_templates, list_indices_by_pattern,
                                                parse_id_list)
from resource_migrator.models.cluster import AuthMethod
from tests.utils import create_valid_cluster


def test_apply_exclusions_drops_reserved_names():
    names = ["a", "a.internal", "filebeat-1", "b", "metricbeat-2024", ".kibana", "orders"]
    assert apply_exclusions(names) == ["a", "b", "orders"]


def test_apply_exclusions_with_no_predicates_keeps_everything():
    assert apply_exclusions(["a", ".b"], excluded_substrings=()) == ["a", ".b"]


def test_default_exclusions():
    assert DEFAULT_EXCLUDED_SUBSTRINGS == ("filebeat", ".", "metric")


def test_parse_id_list_strips_blanks_and_repeats():
    assert parse_id_list(" s1, s2,,s1 ,").names == ["s1", "s2"]


def test_parse_id_list_empty():
    assert len(parse_id_list("")) == 0
    assert len(parse_id_list(None)) == 0


def test_list_all_indices_applies_exclusions_in_order(requests_mock):
    cluster = create_valid_cluster(auth_type=AuthMethod.NO_AUTH)
    requests_mock.get(f"{cluster.endpoint}{ALL_INDICES_PATH}",
                      json=[{"i": "a"}, {"i": "a.internal"}, {"i": "filebeat-1"}, {"i": "b"}])
    assert list_all_indices(cluster).names == ["a", "b"]


def test_list_all_indices_fails_soft_on_transport_error(requests_mock):
    cluster = create_valid_cluster(auth_type=AuthMethod.NO_AUTH)
    requests_mock.get(f"{cluster.endpoint}{ALL_INDICES_PATH}", exc=requests.exceptions.ConnectTimeout)
    assert list_all_indices(cluster).names == []


def test_list_all_indices_fails_soft_on_unparseable_body(requests_mock):
    cluster = create_valid_cluster(auth_type=AuthMethod.NO_AUTH)
    requests_mock.get(f"{cluster.endpoint}{ALL_INDICES_PATH}", text="<html>gateway</html>")
    assert list_all_indices(cluster).names == []


def test_list_all_indices_fails_soft_on_unexpected_shape(requests_mock):
    cluster = create_valid_cluster(auth_type=AuthMethod.NO_AUTH)
    requests_mock.get(f"{cluster.endpoint}{ALL_INDICES_PATH}", json={"error": "nope"})
    assert list_all_indices(cluster).names == []


def test_list_indices_by_pattern_uses_index_field(requests_mock):
    cluster = create_valid_cluster(auth_type=AuthMethod.NO_AUTH)
    requests_mock.get(f"{cluster.endpoint}/_cat/indices/dm-idx-*?format=json",
                      json=[{"index": "dm-idx-1", "health": "green"}, {"index": "dm-idx-2", "health": "yellow"}])
    assert list_indices_by_pattern(cluster, "dm-idx-*").names == ["dm-idx-1", "dm-idx-2"]


def test_list_indices_by_pattern_does_not_apply_exclusions(requests_mock):
    cluster = create_valid_cluster(auth_type=AuthMethod.NO_AUTH)
    requests_mock.get(f"{cluster.endpoint}/_cat/indices/logs*?format=json",
                      json=[{"index": "logs.2024"}, {"index": "logs-metric"}])
    assert list_indices_by_pattern(cluster, "logs*").names == ["logs.2024", "logs-metric"]


def test_list_indices_by_pattern_not_found_is_empty(requests_mock):
    cluster = create_valid_cluster(auth_type=AuthMethod.NO_AUTH)
    requests_mock.get(f"{cluster.endpoint}/_cat/indices/nothing*?format=json", status_code=404)
    assert list_indices_by_pattern(cluster, "nothing*").names == []


def test_list_index_templates_embeds_definitions(requests_mock):
    cluster = create_valid_cluster(auth_type=AuthMethod.NO_AUTH)
    definition = {"index_patterns": ["logs-*"], "template": {"settings": {"number_of_shards": 1}}}
    requests_mock.get(f"{cluster.endpoint}/_index_template/default_*", json={
        "index_templates": [
            {"name": "default_logs", "index_template": definition},
            {"name": "default_empty"},
        ]
    })
    templates = list_index_templates(cluster, "default_*")
    assert templates.names == ["default_logs", "default_empty"]
    assert templates.embedded_definition("default_logs") == definition
    assert templates.embedded_definition("default_empty") is None


def test_list_index_templates_fails_soft(requests_mock):
    cluster = create_valid_cluster(auth_type=AuthMethod.NO_AUTH)
    requests_mock.get(f"{cluster.endpoint}/_index_template/default_*", status_code=500)
    assert len(list_index_templates(cluster, "default_*")) == 0
