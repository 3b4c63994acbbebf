import unittest
from unittest.mock import patch

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from gymtrack.crud import exercise as crud_exercise
from gymtrack.database import Base
from gymtrack.exceptions import StorageError
from gymtrack.models.enums import Equipment, Muscle
from gymtrack.schemas.exercise import ExerciseForm
from gymtrack.services import exercise_service
from gymtrack.services.exercise_service import FormState, Persisted, Rejected
from tests.fakes import RecordingImageStore, upload

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def form(name="Pull Up", **overrides):
    values = {
        "name": name,
        "force": "0",
        "level": "2",
        "mechanic": "0",
        "category": "1",
        "primary": "9",
        "secondary": ["3", "6"],
        "equipment": ["8"],
        "instructions": "hang, then pull",
    }
    values.update(overrides)
    return values


class TestExerciseWorkflow(unittest.TestCase):
    def setUp(self):
        Base.metadata.create_all(bind=engine)
        self.db = TestingSessionLocal()
        self.store = RecordingImageStore()

    def tearDown(self):
        self.db.close()
        Base.metadata.drop_all(bind=engine)

    def submit(self, values, files=(), exercise_id=None, validation_only=False, store=None):
        return exercise_service.submit_exercise(
            self.db, store or self.store, values, list(files),
            exercise_id=exercise_id, validation_only=validation_only,
        )

    def seed(self, name, images=()):
        draft = ExerciseForm(name=name, instructions="seeded")
        return crud_exercise.create_exercise(self.db, draft, list(images))

    # --- create path ---

    def test_create_without_images(self):
        outcome = self.submit(form())
        self.assertIsInstance(outcome, Persisted)
        self.assertEqual(outcome.exercise.images, [])
        self.assertEqual(outcome.exercise.secondary_muscles, [Muscle.BICEPS, Muscle.FOREARMS])
        self.assertEqual(outcome.exercise.equipment, [Equipment.OTHER])
        self.assertEqual(self.store.calls, [])

    def test_create_with_images_uses_name_and_upload_order(self):
        outcome = self.submit(form("Row"), files=[upload("b.jpg"), upload("a.jpg")])
        self.assertIsInstance(outcome, Persisted)
        self.assertEqual(outcome.exercise.images, ["Row_0", "Row_1"])
        self.assertEqual(self.store.calls, [("save", "Row", ["b.jpg", "a.jpg"])])

    def test_create_duplicate_name(self):
        self.seed("bla")
        outcome = self.submit(form("bla"), files=[upload("a.jpg")])
        self.assertIsInstance(outcome, Rejected)
        self.assertIn("already exists", outcome.error)
        self.assertEqual(outcome.values["name"], "bla")
        self.assertEqual(outcome.button, "Create")
        self.assertEqual(self.store.calls, [])
        self.assertEqual(len(crud_exercise.list_exercises(self.db)), 1)

    def test_duplicate_check_skips_insert(self):
        with patch.object(exercise_service, "crud_exercise") as mock_crud:
            mock_crud.count_by_name.return_value = 1
            outcome = self.submit(form("bla"), files=[upload("a.jpg")])
        self.assertIn("already exists", outcome.error)
        mock_crud.count_by_name.assert_called_once_with(self.db, "bla", exclude_id=None)
        mock_crud.create_exercise.assert_not_called()
        self.assertEqual(self.store.calls, [])

    def test_partial_upload_failure_creates_nothing(self):
        store = RecordingImageStore(fail_at=1)
        with patch.object(exercise_service.crud_exercise, "create_exercise") as create:
            outcome = self.submit(form("Row"), files=[upload("a.jpg"), upload("b.jpg")], store=store)
        self.assertIsInstance(outcome, Rejected)
        self.assertIn("b.jpg", outcome.error)
        create.assert_not_called()
        # no compensation: the first file stays on the store
        self.assertEqual(list(store.files), ["Row_0"])

    def test_create_after_rename_keeps_image_ownership(self):
        first = self.submit(form("Row"), files=[upload("a.png", b"first")])
        self.submit(form("Seated Row"), exercise_id=first.exercise.id)
        outcome = self.submit(form("Row"), files=[upload("b.png", b"second")])
        self.assertIsInstance(outcome, Rejected)
        self.assertIn("Row_0", outcome.error)
        self.assertEqual(self.store.files["Row_0"], b"first")
        self.assertEqual(len(self.store.calls_to("save")), 1)
        keys = [e.images for e in crud_exercise.list_exercises(self.db)]
        self.assertEqual(keys, [["Row_0"]])

    def test_create_after_rename_without_images(self):
        first = self.submit(form("Row"), files=[upload("a.png")])
        self.submit(form("Seated Row"), exercise_id=first.exercise.id)
        outcome = self.submit(form("Row"))
        self.assertIsInstance(outcome, Persisted)
        self.assertEqual(outcome.exercise.images, [])

    def test_storage_failure_on_create_is_rejected(self):
        with patch.object(exercise_service.crud_exercise, "create_exercise",
                          side_effect=StorageError("disk full")):
            outcome = self.submit(form())
        self.assertIsInstance(outcome, Rejected)
        self.assertEqual(outcome.error, "disk full")

    # --- binding ---

    def test_missing_name_is_rejected(self):
        values = form(name="")
        outcome = self.submit(values)
        self.assertIsInstance(outcome, Rejected)
        self.assertIn("name", outcome.error)
        self.assertEqual(outcome.values, values)

    def test_missing_instructions_is_rejected(self):
        values = form()
        del values["instructions"]
        outcome = self.submit(values)
        self.assertIsInstance(outcome, Rejected)
        self.assertIn("instructions", outcome.error)

    def test_non_numeric_or_out_of_range_attribute_is_rejected(self):
        for overrides in ({"force": "push"}, {"level": "3"}, {"primary": "-1"}, {"equipment": ["9"]}):
            with self.subTest(overrides=overrides):
                outcome = self.submit(form(**overrides))
                self.assertIsInstance(outcome, Rejected)
                self.assertTrue(outcome.error)
        self.assertEqual(crud_exercise.list_exercises(self.db), [])

    # --- validation-only ---

    def test_validation_only_never_writes(self):
        existing = self.seed("Row", images=["Row_0"])
        cases = [
            (form(), None),
            (form(name=""), None),
            (form("Row"), existing.id),
            (form(force="x"), existing.id),
        ]
        for values, exercise_id in cases:
            with self.subTest(values=values, exercise_id=exercise_id):
                with patch.object(exercise_service, "crud_exercise") as mock_crud:
                    outcome = self.submit(values, files=[upload("a.jpg")],
                                          exercise_id=exercise_id, validation_only=True)
                self.assertIsInstance(outcome, Rejected)
                self.assertEqual(mock_crud.method_calls, [])
                self.assertEqual(self.store.calls, [])

    def test_validation_only_reports_no_error_for_valid_input(self):
        outcome = self.submit(form(), validation_only=True)
        self.assertEqual(outcome.error, "")
        outcome = self.submit(form(name=""), validation_only=True)
        self.assertNotEqual(outcome.error, "")

    # --- update path ---

    def test_update_without_files_keeps_images(self):
        existing = self.seed("Row", images=["Row_0", "Row_1"])
        outcome = self.submit(form("Seated Row"), exercise_id=existing.id)
        self.assertIsInstance(outcome, Persisted)
        self.assertEqual(outcome.exercise.name, "Seated Row")
        self.assertEqual(outcome.exercise.images, ["Row_0", "Row_1"])
        self.assertEqual(self.store.calls, [])

    def test_update_with_files_replaces_images(self):
        existing = self.seed("Row", images=["Row_0", "Row_1"])
        outcome = self.submit(form("Seated Row"), files=[upload("x.png"), upload("y.png")],
                              exercise_id=existing.id)
        self.assertIsInstance(outcome, Persisted)
        self.assertEqual(outcome.exercise.images, ["Seated Row_0", "Seated Row_1"])
        self.assertEqual(self.store.calls, [
            ("remove", ["Row_0", "Row_1"]),
            ("save", "Seated Row", ["x.png", "y.png"]),
        ])

    def test_update_keeping_own_name(self):
        existing = self.seed("Row")
        outcome = self.submit(form("Row"), exercise_id=existing.id)
        self.assertIsInstance(outcome, Persisted)

    def test_update_to_taken_name(self):
        self.seed("Squat")
        existing = self.seed("Row")
        outcome = self.submit(form("Squat"), exercise_id=existing.id)
        self.assertIsInstance(outcome, Rejected)
        self.assertIn("already exists", outcome.error)
        self.assertEqual(outcome.button, "Update")
        self.assertEqual(crud_exercise.get_exercise(self.db, existing.id).name, "Row")

    def test_update_missing_exercise(self):
        outcome = self.submit(form(), files=[upload("a.jpg")], exercise_id=99)
        self.assertIsInstance(outcome, Rejected)
        self.assertIn("not found", outcome.error)
        self.assertEqual(self.store.calls, [])

    def test_update_upload_failure_keeps_record(self):
        existing = self.seed("Row", images=["Row_0"])
        store = RecordingImageStore(fail_at=0)
        outcome = self.submit(form("Row"), files=[upload("a.jpg")], exercise_id=existing.id, store=store)
        self.assertIsInstance(outcome, Rejected)
        self.db.expire_all()
        self.assertEqual(crud_exercise.get_exercise(self.db, existing.id).images, ["Row_0"])

    def test_update_cannot_take_images_of_another_exercise(self):
        self.seed("Seated Row", images=["Row_0"])
        existing = self.seed("Cable Row", images=["Cable Row_0"])
        outcome = self.submit(form("Row"), files=[upload("x.png")], exercise_id=existing.id)
        self.assertIsInstance(outcome, Rejected)
        self.assertIn("Row_0", outcome.error)
        self.assertEqual(self.store.calls, [])
        self.db.expire_all()
        self.assertEqual(crud_exercise.get_exercise(self.db, existing.id).images, ["Cable Row_0"])

    def test_update_may_reuse_own_image_keys(self):
        existing = self.seed("Row", images=["Row_0"])
        outcome = self.submit(form("Row"), files=[upload("x.png")], exercise_id=existing.id)
        self.assertIsInstance(outcome, Persisted)
        self.assertEqual(outcome.exercise.images, ["Row_0"])

    def test_redisplayed_update_shows_current_images(self):
        self.seed("Squat")
        existing = self.seed("Row", images=["Row_0"])
        for values, validation_only in ((form("Squat"), False), (form("Row"), True)):
            with self.subTest(validation_only=validation_only):
                outcome = self.submit(values, exercise_id=existing.id, validation_only=validation_only)
                state = exercise_service.with_current_images(self.db, outcome)
                self.assertEqual(state.values["images"], ["Row_0"])
                self.assertNotIn("images", values)

    def test_redisplayed_create_has_no_images(self):
        outcome = self.submit(form(name=""))
        state = exercise_service.with_current_images(self.db, outcome)
        self.assertNotIn("images", state.values)

    # --- delete, read, list ---

    def test_remove_exercise_deletes_images(self):
        existing = self.seed("Row", images=["Row_0"])
        self.assertIsNone(exercise_service.remove_exercise(self.db, self.store, existing.id))
        self.assertEqual(crud_exercise.list_exercises(self.db), [])
        self.assertEqual(self.store.calls, [("remove", ["Row_0"])])

    def test_remove_missing_exercise(self):
        error = exercise_service.remove_exercise(self.db, self.store, 5)
        self.assertIn("not found", error)
        self.assertEqual(self.store.calls, [])

    def test_remove_failure_leaves_listing_unchanged(self):
        self.seed("Row")
        second = self.seed("Squat", images=["Squat_0"])
        with patch.object(exercise_service.crud_exercise, "delete_exercise",
                          side_effect=StorageError("locked")):
            with self.assertLogs("gymtrack.services.exercise_service", level="ERROR"):
                error = exercise_service.remove_exercise(self.db, self.store, second.id)
        self.assertEqual(error, "locked")
        result = exercise_service.list_exercises(self.db)
        self.assertEqual([e.name for e in result.exercises], ["Row", "Squat"])
        self.assertEqual(self.store.calls, [])

    def test_load_exercise(self):
        existing = self.seed("Row", images=["Row_0"])
        state = exercise_service.load_exercise(self.db, existing.id)
        self.assertIsInstance(state, FormState)
        self.assertEqual(state.error, "")
        self.assertEqual(state.values["name"], "Row")
        self.assertEqual(state.values["images"], ["Row_0"])
        self.assertEqual(state.button, "Update")

    def test_load_missing_exercise(self):
        state = exercise_service.load_exercise(self.db, 12)
        self.assertIn("not found", state.error)

    def test_list_empty(self):
        result = exercise_service.list_exercises(self.db)
        self.assertEqual(result.exercises, [])
        self.assertIsNone(result.error)

    def test_list_storage_failure_degrades_to_empty(self):
        with patch.object(exercise_service.crud_exercise, "list_exercises",
                          side_effect=StorageError("gone")):
            result = exercise_service.list_exercises(self.db)
        self.assertEqual(result.exercises, [])
        self.assertEqual(result.error, "gone")

    def test_filter_with_bad_selection_degrades_to_empty(self):
        self.seed("Row")
        result = exercise_service.filter_exercises(self.db, {"name": "", "force": ["7"]})
        self.assertEqual(result.exercises, [])
        self.assertIn("force", result.error)

    def test_filter(self):
        self.submit(form("Row", equipment=["4"]))
        self.submit(form("Squat", equipment=["1"]))
        result = exercise_service.filter_exercises(self.db, {"name": "", "equipment": ["4"]})
        self.assertEqual([e.name for e in result.exercises], ["Row"])


if __name__ == '__main__':
    unittest.main()
