"""Tests for the sync engine."""

import itertools
import json

import pytest

from pr_tracker.errors import (
    ExerciseValidationError,
    RecordValidationError,
    StorageWriteError,
)
from pr_tracker.models import BarType, ExerciseCategory, ExerciseDraft, MeasurementUnit
from pr_tracker.services import SyncEngine
from pr_tracker.storage import MemoryKeyValueStore


async def _add_bench(engine):
    return await engine.add_exercise(
        ExerciseDraft(
            name="Bench Press",
            category=ExerciseCategory.BARBELL,
            unit=MeasurementUnit.LBS,
            bar_type=BarType.STANDARD,
        )
    )


class TestExercises:
    """Tests for exercise management."""

    async def test_add_exercise_persists_internally(self, engine, store):
        exercise = await _add_bench(engine)

        assert engine.exercises == [exercise]
        stored = json.loads(store.data["exercises"])
        assert stored[0]["id"] == exercise.id
        assert stored[0]["name"] == "Bench Press"

    async def test_add_exercise_from_dict(self, engine):
        exercise = await engine.add_exercise(
            {"name": " Plank ", "category": "bodyweight", "unit": "time"}
        )

        assert exercise.name == "Plank"
        assert exercise.unit == MeasurementUnit.TIME

    async def test_duplicate_name_rejected(self, engine):
        await _add_bench(engine)

        with pytest.raises(ExerciseValidationError, match="already exists"):
            await engine.add_exercise({"name": "  bench PRESS "})

        assert len(engine.exercises) == 1

    async def test_empty_name_rejected(self, engine, store):
        with pytest.raises(ExerciseValidationError):
            await engine.add_exercise({"name": "   "})

        assert engine.exercises == []
        assert "exercises" not in store.data

    async def test_invalid_category_rejected(self, engine):
        with pytest.raises(ExerciseValidationError):
            await engine.add_exercise({"name": "Curl", "category": "juggling"})

    @pytest.mark.parametrize(
        "data",
        [
            ExerciseDraft(name="Bench", current_pr="225"),
            {"name": "Bench", "currentPRPlates": "heavy"},
        ],
    )
    async def test_non_numeric_pr_rejected(self, engine, store, data):
        with pytest.raises(ExerciseValidationError, match="must be a number"):
            await engine.add_exercise(data)

        assert engine.exercises == []
        assert "exercises" not in store.data

    async def test_update_to_non_numeric_pr_rejected(self, engine):
        bench = await _add_bench(engine)

        with pytest.raises(ExerciseValidationError):
            await engine.update_exercise(bench.id, {"currentPR": "x"})

        assert engine.get_exercise(bench.id).current_pr is None

        await engine.add_pr_record({"exerciseId": bench.id, "value": 135})
        assert engine.get_exercise(bench.id).current_pr == 135

    async def test_update_away_from_barbell_resets_bar(self, engine, store):
        bench = await _add_bench(engine)

        updated = await engine.update_exercise(bench.id, {"category": "dumbbell"})

        assert updated.bar_type == BarType.NONE
        assert json.loads(store.data["exercises"])[0]["barType"] == "none"

    async def test_ids_are_unique(self, engine):
        exercises = [await engine.add_exercise({"name": f"Lift {i}"}) for i in range(25)]

        assert len({ex.id for ex in exercises}) == 25

    async def test_update_exercise(self, engine, store):
        bench = await _add_bench(engine)

        updated = await engine.update_exercise(bench.id, {"notes": "Pause reps", "name": "Paused Bench"})

        assert updated.id == bench.id
        assert updated.notes == "Pause reps"
        assert engine.get_exercise(bench.id).name == "Paused Bench"
        assert json.loads(store.data["exercises"])[0]["notes"] == "Pause reps"

    async def test_update_keeps_own_name(self, engine):
        bench = await _add_bench(engine)

        updated = await engine.update_exercise(bench.id, {"name": "bench press"})

        assert updated.name == "bench press"

    async def test_update_to_duplicate_name_rejected(self, engine):
        bench = await _add_bench(engine)
        await engine.add_exercise({"name": "Squat"})

        with pytest.raises(ExerciseValidationError):
            await engine.update_exercise(bench.id, {"name": "SQUAT"})

        assert engine.get_exercise(bench.id).name == "Bench Press"

    async def test_update_unknown_id_is_noop(self, engine, store):
        await _add_bench(engine)
        before = dict(store.data)

        assert await engine.update_exercise("missing", {"name": "X"}) is None
        assert store.data == before

    async def test_delete_cascades_to_records(self, engine, store):
        bench = await _add_bench(engine)
        squat = await engine.add_exercise({"name": "Squat"})
        await engine.add_pr_record({"exerciseId": bench.id, "value": 200})
        await engine.add_pr_record({"exerciseId": squat.id, "value": 300})

        await engine.delete_exercise(bench.id)

        assert [ex.id for ex in engine.exercises] == [squat.id]
        assert [pr.exercise_id for pr in engine.pr_records] == [squat.id]
        stored = json.loads(store.data["prRecords"])
        assert [pr["exerciseId"] for pr in stored] == [squat.id]

    async def test_find_exercise(self, engine):
        bench = await _add_bench(engine)

        assert engine.find_exercise(" BENCH press") == bench
        assert engine.find_exercise("Deadlift") is None


class TestRecords:
    """Tests for PR records and the running max."""

    async def test_first_record_sets_current_pr(self, engine):
        bench = await _add_bench(engine)

        await engine.add_pr_record({"exerciseId": bench.id, "value": 135, "platesWeight": 90})

        assert engine.get_exercise(bench.id).current_pr == 135
        assert engine.get_exercise(bench.id).current_pr_plates == 90

    async def test_current_pr_is_running_max(self, engine):
        bench = await _add_bench(engine)

        await engine.add_pr_record({"exerciseId": bench.id, "value": 200, "platesWeight": 155})
        await engine.add_pr_record({"exerciseId": bench.id, "value": 185, "platesWeight": 140})
        assert engine.get_exercise(bench.id).current_pr == 200
        assert engine.get_exercise(bench.id).current_pr_plates == 155

        await engine.add_pr_record({"exerciseId": bench.id, "value": 225, "platesWeight": 180})
        assert engine.get_exercise(bench.id).current_pr == 225
        assert engine.get_exercise(bench.id).current_pr_plates == 180
        assert engine.total_prs == 3

    async def test_record_and_pr_persisted_together(self, engine, store):
        bench = await _add_bench(engine)

        record = await engine.add_pr_record({"exercise_id": bench.id, "value": 150})

        assert json.loads(store.data["exercises"])[0]["currentPR"] == 150
        assert json.loads(store.data["prRecords"])[0]["id"] == record.id

    async def test_date_defaults_to_clock(self, store, files, document_dir):
        engine = SyncEngine(store, files, document_dir, clock=lambda: "2024-06-01T12:00:00.000Z")
        await engine.load()
        bench = await _add_bench(engine)

        record = await engine.add_pr_record({"exerciseId": bench.id, "value": 100})

        assert record.date == "2024-06-01T12:00:00.000Z"

    @pytest.mark.parametrize("value", ["100", None, True, float("nan")])
    async def test_value_must_be_number(self, engine, value):
        bench = await _add_bench(engine)

        with pytest.raises(RecordValidationError):
            await engine.add_pr_record({"exerciseId": bench.id, "value": value})

        assert engine.pr_records == []

    @pytest.mark.parametrize("plates", ["x", float("inf"), False])
    async def test_plates_weight_must_be_number(self, engine, plates):
        bench = await _add_bench(engine)

        with pytest.raises(RecordValidationError, match="Plate weight"):
            await engine.add_pr_record({"exerciseId": bench.id, "value": 135, "platesWeight": plates})

        assert engine.pr_records == []
        assert engine.get_exercise(bench.id).current_pr is None

    async def test_unknown_exercise_rejected(self, engine):
        with pytest.raises(RecordValidationError, match="Unknown exercise"):
            await engine.add_pr_record({"exerciseId": "nope", "value": 100})

    async def test_history_newest_first(self, engine):
        bench = await _add_bench(engine)
        squat = await engine.add_exercise({"name": "Squat"})
        for value, date in [
            (100, "2024-01-10T00:00:00.000Z"),
            (120, "2024-03-10T00:00:00.000Z"),
            (110, "2024-02-10T00:00:00.000Z"),
        ]:
            await engine.add_pr_record({"exerciseId": bench.id, "value": value, "date": date})
        await engine.add_pr_record({"exerciseId": squat.id, "value": 300})

        history = engine.get_exercise_history(bench.id)

        assert [pr.value for pr in history] == [120, 110, 100]
        assert engine.get_exercise_history("missing") == []


class TestLoad:
    """Tests for choosing the authoritative backend on load."""

    async def test_load_empty(self, engine):
        assert engine.loaded
        assert engine.exercises == []
        assert not engine.sync_enabled

    async def test_load_from_internal(self, store, files, document_dir):
        first = SyncEngine(store, files, document_dir)
        await first.load()
        await first.add_exercise({"name": "Deadlift"})

        async with SyncEngine(store, files, document_dir) as second:
            assert [ex.name for ex in second.exercises] == ["Deadlift"]

    async def test_load_from_sync_file(self, files, document_dir, sample_snapshot_json):
        path = document_dir / "sync.json"
        path.write_text(sample_snapshot_json)
        store = MemoryKeyValueStore({"preferences": json.dumps({"syncFilePath": str(path)})})

        engine = SyncEngine(store, files, document_dir)
        await engine.load()

        assert [ex.id for ex in engine.exercises] == ["ex-bench", "ex-pullup"]
        assert engine.total_prs == 2
        assert engine.preferences.default_unit.value == "kg"
        # The file's own syncFilePath is ignored in favor of where it was read from
        assert engine.preferences.sync_file_path == str(path)
        assert json.loads(store.data["preferences"])["syncFilePath"] == str(path)

    async def test_missing_sync_file_falls_back(self, files, document_dir):
        store = MemoryKeyValueStore(
            {
                "preferences": json.dumps({"syncFilePath": str(document_dir / "gone.json")}),
                "exercises": json.dumps(
                    [{"id": "1", "name": "Row", "category": "barbell", "unit": "kg"}]
                ),
            }
        )

        engine = SyncEngine(store, files, document_dir)
        await engine.load()

        assert [ex.name for ex in engine.exercises] == ["Row"]
        assert engine.loaded

    async def test_corrupted_bucket_keeps_the_others(self, files, document_dir):
        rows = [{"id": "1", "name": "Row", "category": "barbell", "unit": "kg"}]
        store = MemoryKeyValueStore(
            {"exercises": json.dumps(rows), "prRecords": "{broken", "preferences": "[]"}
        )

        engine = SyncEngine(store, files, document_dir)
        await engine.load()

        assert [ex.name for ex in engine.exercises] == ["Row"]
        assert engine.pr_records == []
        assert engine.preferences.sync_file_path is None

        await engine.add_exercise({"name": "Squat"})
        names = [ex["name"] for ex in json.loads(store.data["exercises"])]
        assert names == ["Row", "Squat"]

    async def test_corrupted_internal_storage_starts_empty(self, files, document_dir):
        store = MemoryKeyValueStore({"exercises": "{broken", "preferences": "[]"})

        engine = SyncEngine(store, files, document_dir)
        await engine.load()

        assert engine.exercises == []
        assert engine.preferences.sync_file_path is None

    async def test_close_resets_state(self, engine):
        await _add_bench(engine)

        await engine.close()

        assert engine.exercises == []
        assert not engine.loaded


class TestSync:
    """Tests for enabling, using and disabling the sync file."""

    async def test_enable_inside_document_dir(self, engine, store, document_dir):
        await _add_bench(engine)
        path = document_dir / "sync.json"

        result = await engine.set_sync_file(str(path))

        assert result == str(path)
        assert engine.sync_enabled
        document = json.loads(path.read_text())
        assert document["exercises"][0]["name"] == "Bench Press"
        assert document["preferences"]["syncFilePath"] == str(path)
        assert json.loads(store.data["preferences"])["syncFilePath"] == str(path)

    async def test_writes_go_to_sync_file(self, engine, store, document_dir):
        path = document_dir / "sync.json"
        await engine.set_sync_file(str(path))
        internal_exercises = store.data["exercises"]

        bench = await _add_bench(engine)
        await engine.add_pr_record({"exerciseId": bench.id, "value": 225})

        document = json.loads(path.read_text())
        assert document["exercises"][0]["currentPR"] == 225
        assert document["stats"]["totalPRs"] == 1
        assert store.data["exercises"] == internal_exercises

    async def test_file_uri_accepted(self, engine, document_dir):
        path = document_dir / "sync.json"

        result = await engine.set_sync_file(f"file://{path}")

        assert result == str(path)
        assert path.exists()

    async def test_outside_file_is_copied_in(
        self, engine, files, document_dir, outside_dir, sample_snapshot_json
    ):
        source = outside_dir / "shared.json"
        source.write_text(sample_snapshot_json)

        result = await engine.set_sync_file(str(source))

        assert result.startswith(str(document_dir))
        assert result != str(source)
        assert [ex.id for ex in engine.exercises] == ["ex-bench", "ex-pullup"]
        assert json.loads(open(result).read())["stats"]["totalPRs"] == 2
        assert source.read_text() == sample_snapshot_json
        assert str(source) not in files.writes

    async def test_unreadable_outside_file_starts_fresh(self, engine, document_dir, outside_dir):
        bench = await _add_bench(engine)

        result = await engine.set_sync_file(str(outside_dir / "missing.json"))

        assert result.startswith(str(document_dir))
        assert not (outside_dir / "missing.json").exists()
        document = json.loads(open(result).read())
        assert document["exercises"][0]["id"] == bench.id

    async def test_invalid_outside_file_keeps_current_data(self, engine, outside_dir):
        await _add_bench(engine)
        source = outside_dir / "notes.json"
        source.write_text('{"hello": "world"}')

        await engine.set_sync_file(str(source))

        assert [ex.name for ex in engine.exercises] == ["Bench Press"]

    async def test_disable_leaves_file_untouched(self, engine, store, document_dir):
        path = document_dir / "sync.json"
        await engine.set_sync_file(str(path))
        await _add_bench(engine)
        before = path.read_text()

        await engine.set_sync_file(None)
        await engine.add_exercise({"name": "Squat"})

        assert not engine.sync_enabled
        assert path.read_text() == before
        names = [ex["name"] for ex in json.loads(store.data["exercises"])]
        assert names == ["Bench Press", "Squat"]
        assert "syncFilePath" not in json.loads(store.data["preferences"])

    async def test_write_failure_propagates_but_memory_keeps_change(
        self, engine, files, document_dir
    ):
        await engine.set_sync_file(str(document_dir / "sync.json"))
        files.fail_writes = True

        with pytest.raises(StorageWriteError):
            await _add_bench(engine)

        assert [ex.name for ex in engine.exercises] == ["Bench Press"]

    async def test_unreadable_sync_file_is_not_overwritten(self, engine, document_dir):
        path = document_dir / "sync.json"
        await engine.set_sync_file(str(path))
        bench = await _add_bench(engine)
        await engine.add_pr_record({"exerciseId": bench.id, "value": 225})
        path.write_text("{ partial")

        with pytest.raises(StorageWriteError, match="not overwriting"):
            await engine.add_exercise({"name": "Squat"})

        assert path.read_text() == "{ partial"
        assert engine.total_prs == 1

    async def test_missing_sync_file_is_rewritten_in_full(self, engine, document_dir):
        path = document_dir / "sync.json"
        await engine.set_sync_file(str(path))
        bench = await _add_bench(engine)
        await engine.add_pr_record({"exerciseId": bench.id, "value": 225})
        path.unlink()

        await engine.add_exercise({"name": "Squat"})

        document = json.loads(path.read_text())
        assert [ex["name"] for ex in document["exercises"]] == ["Bench Press", "Squat"]
        assert document["stats"]["totalPRs"] == 1
        assert document["prRecords"][0]["value"] == 225
        assert document["preferences"]["syncFilePath"] == str(path)

    async def test_preference_change_keeps_sync(self, engine, store, document_dir):
        path = document_dir / "sync.json"
        await engine.set_sync_file(str(path))

        await engine.update_preferences({"themeColor": "yellow"})

        assert json.loads(path.read_text())["preferences"]["themeColor"] == "yellow"
        assert json.loads(store.data["preferences"])["themeColor"] == "yellow"


class TestIdFactory:
    """Injected ID generation."""

    async def test_custom_ids(self, store, files, document_dir):
        counter = itertools.count(1)
        engine = SyncEngine(store, files, document_dir, id_factory=lambda: f"id-{next(counter)}")
        await engine.load()

        exercise = await engine.add_exercise({"name": "Dip"})
        record = await engine.add_pr_record({"exerciseId": exercise.id, "value": 20})

        assert exercise.id == "id-1"
        assert record.id == "id-2"
