import pytest

from resource_migrator.models.migration_ledger import MigrationLedger, MigrationOutcome
from resource_migrator.models.resource_set import ResourceSet, make_batches


def test_ledger_counts_each_outcome():
    ledger = MigrationLedger(title="Stored Script Migration")
    ledger.plan(["s1", "s2", "s3"])
    ledger.record_migrated("s1")
    ledger.record_skipped("s2")
    ledger.record_failed("s3", "no valid script content")
    assert (ledger.total, ledger.migrated, ledger.skipped, ledger.failed) == (3, 1, 1, 1)
    assert ledger.outcome_of("s3") is MigrationOutcome.FAILED
    assert ledger.unprocessed == []
    assert ledger.has_failures()


def test_ledger_refuses_second_outcome_for_a_name():
    ledger = MigrationLedger(title="Index Migration")
    ledger.plan(["a"])
    ledger.record_migrated("a")
    with pytest.raises(ValueError):
        ledger.record_failed("a", "boom")


def test_ledger_failures_keep_processing_order():
    ledger = MigrationLedger(title="Index Migration")
    ledger.plan(["c", "a", "b"])
    for name in ("c", "a", "b"):
        ledger.record_failed(name, f"{name} failed")
    assert list(ledger.failures) == ["c", "a", "b"]


def test_ledger_to_dict():
    ledger = MigrationLedger(title="All Index Migration", source_total=4, target_total=1)
    ledger.plan(["b", "c"])
    ledger.record_migrated("b")
    ledger.record_failed("c", "mapper_parsing_exception")
    assert ledger.to_dict() == {
        "title": "All Index Migration",
        "total": 2,
        "migrated": 1,
        "skipped": 0,
        "failed": 1,
        "failures": [{"name": "c", "reason": "mapper_parsing_exception"}],
        "aborted": False,
        "source_total": 4,
        "target_total": 1,
    }


def test_ledger_render():
    ledger = MigrationLedger(title="All Index Migration", source_total=2, target_total=1, show_plan=True)
    ledger.plan(["b"])
    ledger.record_failed("b", "index_already_exists")
    rendered = ledger.render()
    lines = rendered.splitlines()
    assert lines[0].startswith("╔") and lines[-1].startswith("╚")
    assert "All Index Migration Summary" in lines[1]
    assert "Visible in Source:          2" in rendered
    assert "Total Candidates:           1" in rendered
    assert "Failed:                     1" in rendered
    assert "Missing in Target:" in rendered
    assert "- b : index_already_exists" in rendered


def test_ledger_render_without_totals_or_failures():
    rendered = MigrationLedger(title="Ingest Pipeline Migration").render()
    assert "Visible in Source" not in rendered
    assert "Failures:" not in rendered
    assert "Total Candidates:           0" in rendered


def test_resource_set_drops_repeats_in_order():
    assert ResourceSet(["b", "a", "b", "c"]).names == ["b", "a", "c"]


def test_resource_set_without_is_order_preserving_sequence_difference():
    source = ResourceSet(["z", "a", "m", "b"], {"z": {"x": 1}, "a": {"x": 2}})
    target = ResourceSet(["a", "q"])
    missing = source.without(target)
    assert missing.names == ["z", "m", "b"]
    assert missing.embedded == {"z": {"x": 1}}


def test_resource_set_sorted():
    assert ResourceSet(["b", "c", "a"]).sorted().names == ["a", "b", "c"]


@pytest.mark.parametrize("batch_size,expected", [
    (2, [["a", "b"], ["c", "d"], ["e"]]),
    (5, [["a", "b", "c", "d", "e"]]),
    (100, [["a", "b", "c", "d", "e"]]),
    (None, [["a", "b", "c", "d", "e"]]),
])
def test_make_batches(batch_size, expected):
    assert make_batches(["a", "b", "c", "d", "e"], batch_size) == expected


def test_make_batches_empty():
    assert make_batches([], 10) == []
