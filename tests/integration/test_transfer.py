import json

import pytest

from verdict.exceptions import ImportValidationError
from verdict.models import AnalysisResult
from verdict.storage import AnalysisRepository, BoundedCollectionStore
from verdict.storage.backends import MemoryBackend
from verdict.transfer import (
    ImportMode, ImportValidator, TransferService, export_file_name, iso_timestamp
)


def export_text(records, **overrides):
    document = {
        "exportedAt": "2024-06-12T12:00:00.000Z",
        "appVersion": "1.0.0",
        "totalAnalyses": len(records),
        "analyses": records,
    }
    document.update(overrides)
    return json.dumps(document)


async def seed(repository, records):
    await repository.replace_all(records)


def test_iso_timestamp_has_millisecond_precision():
    assert iso_timestamp(0) == "1970-01-01T00:00:00.000Z"
    assert iso_timestamp(1234) == "1970-01-01T00:00:01.234Z"


def test_export_file_name():
    assert export_file_name(1718193600000) == "verdict-plus-export-1718193600000.json"


@pytest.mark.asyncio
async def test_export_document_shape(transfer, analyses, record_factory, clock):
    await seed(analyses, [record_factory("analysis_2", 2), record_factory("analysis_1", 1)])

    document = json.loads(await transfer.export_analyses())

    assert document["exportedAt"] == iso_timestamp(clock.now)
    assert document["appVersion"] == "1.0.0"
    assert document["totalAnalyses"] == 2
    assert [record["id"] for record in document["analyses"]] == ["analysis_2", "analysis_1"]


@pytest.mark.asyncio
async def test_export_then_import_into_empty_store(transfer, analyses, record_factory, clock):
    await seed(analyses, [record_factory("analysis_1", 1)])
    exported = await transfer.export_analyses()

    target = TransferService(AnalysisRepository(BoundedCollectionStore(MemoryBackend()), clock=clock))
    result = await target.import_analyses(exported, ImportMode.REPLACE)

    assert result.success
    restored = await target.analyses.load_analyses()
    assert [analysis.to_dict() for analysis in restored] == [
        AnalysisResult.from_dict(record_factory("analysis_1", 1)).to_dict()
    ]


@pytest.mark.asyncio
async def test_replace_discards_existing(transfer, analyses, record_factory):
    await seed(analyses, [record_factory("analysis_a", 10), record_factory("analysis_b", 5)])

    result = await transfer.import_analyses(export_text([record_factory("analysis_c", 1)]), ImportMode.REPLACE)

    assert result.success
    assert result.imported == 1
    assert result.message == "Imported 1 analysis"
    assert [record["id"] for record in await analyses.load_records()] == ["analysis_c"]


@pytest.mark.asyncio
async def test_merge_deduplicates_and_sorts_newest_first(transfer, analyses, record_factory):
    await seed(analyses, [record_factory("analysis_b", 300), record_factory("analysis_a", 100)])
    incoming = [record_factory("analysis_b", 300), record_factory("analysis_c", 200),
                record_factory("analysis_c", 200)]

    result = await transfer.import_analyses(export_text(incoming), ImportMode.MERGE)

    assert result.success
    assert result.imported == 1
    assert result.skipped == 2
    assert result.message == "Imported 1 analysis (2 skipped)"
    assert [record["id"] for record in await analyses.load_records()] == ["analysis_b", "analysis_c", "analysis_a"]


@pytest.mark.asyncio
async def test_merge_respects_capacity(store, clock, record_factory):
    repository = AnalysisRepository(store, cap=3, clock=clock)
    service = TransferService(repository, clock=clock)
    await seed(repository, [record_factory("analysis_new", 500), record_factory("analysis_mid", 300)])
    incoming = [record_factory(f"analysis_old{index}", index) for index in range(3)]

    result = await service.import_analyses(export_text(incoming), ImportMode.MERGE)

    assert result.imported == 3
    ids = [record["id"] for record in await repository.load_records()]
    assert ids == ["analysis_new", "analysis_mid", "analysis_old2"]


@pytest.mark.asyncio
async def test_legacy_ids_deduplicate_after_migration(transfer, analyses, legacy_record_factory):
    existing = await transfer.import_analyses(export_text([legacy_record_factory()]), ImportMode.REPLACE)
    assert existing.success
    assert [record["id"] for record in await analyses.load_records()] == ["analysis_1700000000000"]

    result = await transfer.import_analyses(export_text([legacy_record_factory()]), ImportMode.MERGE)

    assert result.imported == 0
    assert result.skipped == 1
    assert len(await analyses.load_records()) == 1


@pytest.mark.asyncio
async def test_imported_legacy_records_are_stored_at_current_version(transfer, analyses, legacy_record_factory):
    result = await transfer.import_analyses(export_text([legacy_record_factory()]), ImportMode.MERGE)

    assert result.success
    assert "Migrated from V1 to V2: added takeaway field" in result.warnings
    stored = (await analyses.load_records())[0]
    assert stored["version"] == 3
    assert stored["takeaway"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("payload,reason", [
    ("", "file is empty"),
    ("{oops", "not valid JSON (line 1, column 2)"),
    ("[]", "expected a JSON object at the top level"),
    (json.dumps({"appVersion": "1", "totalAnalyses": 0, "analyses": []}), "'exportedAt' must be a string"),
    (export_text([], totalAnalyses="1"), "'totalAnalyses' must be a number"),
    (export_text([]), "the file contains no analyses"),
    (export_text([{"id": "a", "createdAt": 1}]), "analysis #1 has no 'input' object"),
    (export_text([{"id": 5, "createdAt": 1, "input": {}}]), "analysis #1 has no string 'id'"),
])
async def test_invalid_files_change_nothing(transfer, analyses, backend, record_factory, payload, reason):
    await seed(analyses, [record_factory("analysis_a", 1)])
    writes = backend.write_count

    result = await transfer.import_analyses(payload, ImportMode.REPLACE)

    assert not result.success
    assert result.message == f"Invalid import file: {reason}"
    assert backend.write_count == writes
    assert [record["id"] for record in await analyses.load_records()] == ["analysis_a"]


@pytest.mark.asyncio
async def test_file_with_only_unreadable_records_is_rejected(transfer, analyses, backend, record_factory):
    future = record_factory("analysis_f", 1)
    future["version"] = 9
    await seed(analyses, [record_factory("analysis_a", 1)])
    writes = backend.write_count

    result = await transfer.import_analyses(export_text([future]), ImportMode.REPLACE)

    assert not result.success
    assert result.message == "Invalid import file: none of the analyses could be read"
    assert result.skipped == 1
    assert backend.write_count == writes


@pytest.mark.asyncio
async def test_unreadable_records_are_skipped_with_warning(transfer, analyses, record_factory):
    future = record_factory("analysis_f", 1)
    future["version"] = 9

    result = await transfer.import_analyses(export_text([future, record_factory("analysis_ok", 2)]))

    assert result.success
    assert result.imported == 1
    assert result.skipped == 1
    assert any("newer than supported" in warning for warning in result.warnings)


def test_validator_raises_with_reason():
    with pytest.raises(ImportValidationError) as excinfo:
        ImportValidator.validate("   ")
    assert excinfo.value.context["reason"] == "file is empty"

    document = ImportValidator.validate(export_text([{"id": "a", "createdAt": 1, "input": {}}]))
    assert document["totalAnalyses"] == 1


def break_field(record, path, value):
    target = record
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = value
    return record


MALFORMED_FIELDS = [
    (("takeaway",), 1),
    (("winAnalysis",), "oops"),
    (("peaceAnalysis",), ["not", "an", "object"]),
    (("input", "context"), 5),
    (("input", "sides"), ["Alice", "Bob"]),
    (("sideAnalyses",), ["summary only"]),
    (("patternsDetected",), ["Emotional Escalation"]),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("path,value", MALFORMED_FIELDS)
async def test_malformed_records_are_skipped_on_import(transfer, analyses, record_factory, path, value):
    broken = break_field(record_factory("analysis_bad", 2), path, value)

    result = await transfer.import_analyses(export_text([broken, record_factory("analysis_ok", 1)]))

    assert result.success
    assert result.imported == 1
    assert result.skipped == 1
    assert [analysis.id for analysis in await analyses.load_analyses()] == ["analysis_ok"]
    assert [summary.id for summary in await analyses.get_analysis_summaries()] == ["analysis_ok"]


@pytest.mark.asyncio
async def test_import_of_only_malformed_records_is_rejected(transfer, analyses, backend, record_factory):
    writes = backend.write_count

    result = await transfer.import_analyses(
        export_text([break_field(record_factory("analysis_bad", 2), ("takeaway",), 1)])
    )

    assert not result.success
    assert backend.write_count == writes


@pytest.mark.asyncio
@pytest.mark.parametrize("path,value", MALFORMED_FIELDS)
async def test_malformed_stored_records_do_not_break_reads(analyses, store, record_factory, path, value):
    broken = break_field(record_factory("analysis_bad", 2), path, value)
    await store.save(analyses.key, [broken, record_factory("analysis_ok", 1)])

    assert [analysis.id for analysis in await analyses.load_analyses()] == ["analysis_ok"]
    assert await analyses.get_analysis_by_id("analysis_bad") is None
    assert len(await analyses.get_analysis_summaries()) == 1
