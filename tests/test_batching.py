import datetime

from resource_migrator.logic.batching import BATCH_SEPARATOR, batch_file_name, generate_index_batches
from resource_migrator.logic.enumerator import ALL_INDICES_PATH
from tests.utils import FakeCluster


def test_batch_file_name():
    assert batch_file_name(datetime.datetime(2024, 3, 7, 9, 5, 1)) == "IndexBatches_20240307_090501.txt"


def test_generate_index_batches_writes_sorted_visible_indices(tmp_path):
    source = FakeCluster("source", {ALL_INDICES_PATH: [
        {"i": "e"}, {"i": "b"}, {"i": ".kibana"}, {"i": "a"}, {"i": "metricbeat-1"}, {"i": "d"}, {"i": "c"},
    ]})
    path = generate_index_batches(source, str(tmp_path), batch_size=2, now=datetime.datetime(2024, 1, 2, 3, 4, 5))
    assert path == str(tmp_path / "IndexBatches_20240102_030405.txt")
    with open(path) as f:
        assert f.read().splitlines() == ["a,b", BATCH_SEPARATOR, "c,d", BATCH_SEPARATOR, "e"]


def test_generate_index_batches_single_batch(tmp_path):
    source = FakeCluster("source", {ALL_INDICES_PATH: [{"i": "b"}, {"i": "a"}]})
    path = generate_index_batches(source, str(tmp_path))
    with open(path) as f:
        assert f.read() == "a,b\n"


def test_generate_index_batches_without_indices_writes_nothing(tmp_path):
    source = FakeCluster("source", {ALL_INDICES_PATH: []})
    assert generate_index_batches(source, str(tmp_path)) is None
    assert list(tmp_path.iterdir()) == []
