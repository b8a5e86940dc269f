# =============================================================================
# tests/unit/test_local_database.py
# Unit Tests for the SQLite local store
# =============================================================================

import pytest


class TestLocalDatabaseReads:
    """Keyed and foreign-key lookups"""

    def test_get_all_orders_by_name(self, seeded_db):
        """Courses come back alphabetically"""
        names = [row["name"] for row in seeded_db.get_all(seeded_db.COURSES)]
        assert names == ["Distributed Systems", "Mobile Development"]

    def test_get_by_id_missing_returns_none(self, seeded_db):
        assert seeded_db.get_by_id(seeded_db.COURSES, 999) is None
        assert seeded_db.get_by_id(seeded_db.COURSES, None) is None

    def test_get_by_foreign_key(self, seeded_db):
        """Only students of the requested course"""
        rows = seeded_db.get_by_foreign_key(seeded_db.STUDENTS, 1)
        assert {row["id"] for row in rows} == {10, 11}

    def test_foreign_key_lookup_on_courses_rejected(self, seeded_db):
        with pytest.raises(ValueError):
            seeded_db.get_by_foreign_key(seeded_db.COURSES, 1)

    def test_unknown_table_rejected(self, local_db):
        with pytest.raises(ValueError):
            local_db.get_all("teachers")

    def test_count_and_ids(self, seeded_db):
        assert seeded_db.count(seeded_db.STUDENTS) == 3
        assert seeded_db.get_ids(seeded_db.COURSES) == {1, 2}


class TestLocalDatabaseWrites:
    """Upserts, slice replacement, deletes"""

    def test_upsert_is_idempotent(self, local_db, sample_courses):
        rows = [c.to_row() for c in sample_courses]
        local_db.upsert_many(local_db.COURSES, rows)
        local_db.upsert_many(local_db.COURSES, rows)

        assert local_db.count(local_db.COURSES) == 2

    def test_upsert_overwrites_fields(self, seeded_db):
        row = seeded_db.get_by_id(seeded_db.COURSES, 1)
        row["professor"] = "Grace Hopper"
        seeded_db.upsert_many(seeded_db.COURSES, [row])

        assert seeded_db.get_by_id(seeded_db.COURSES, 1)["professor"] == "Grace Hopper"

    def test_upsert_records_cache_metadata(self, local_db, sample_courses):
        local_db.upsert_many(local_db.COURSES, [sample_courses[0].to_row()], from_cache=True)
        row = local_db.get_by_id(local_db.COURSES, 1)

        assert row["is_from_cache"] == 1
        assert row["last_sync_timestamp"]

    def test_upsert_without_id_rejected(self, local_db, sample_courses):
        row = sample_courses[0].to_row()
        row["id"] = None
        with pytest.raises(ValueError):
            local_db.upsert_many(local_db.COURSES, [row])
        assert local_db.count(local_db.COURSES) == 0

    def test_course_upsert_keeps_students(self, seeded_db):
        """Updating a course in place does not cascade to its students"""
        row = seeded_db.get_by_id(seeded_db.COURSES, 1)
        seeded_db.upsert_many(seeded_db.COURSES, [row])

        assert len(seeded_db.get_by_foreign_key(seeded_db.STUDENTS, 1)) == 2

    def test_replace_all_drops_missing_rows(self, seeded_db, sample_courses):
        """Course 2 disappears, and its students with it"""
        seeded_db.replace_all(seeded_db.COURSES, [sample_courses[0].to_row()])

        assert seeded_db.get_ids(seeded_db.COURSES) == {1}
        assert seeded_db.get_by_foreign_key(seeded_db.STUDENTS, 2) == []
        assert len(seeded_db.get_by_foreign_key(seeded_db.STUDENTS, 1)) == 2

    def test_replace_all_with_empty_list_clears(self, seeded_db):
        seeded_db.replace_all(seeded_db.COURSES, [])
        assert seeded_db.count(seeded_db.COURSES) == 0
        assert seeded_db.count(seeded_db.STUDENTS) == 0

    def test_replace_by_foreign_key_only_touches_slice(self, seeded_db, sample_students):
        seeded_db.replace_by_foreign_key(seeded_db.STUDENTS, 1, [sample_students[0].to_row()])

        assert {r["id"] for r in seeded_db.get_by_foreign_key(seeded_db.STUDENTS, 1)} == {10}
        assert {r["id"] for r in seeded_db.get_by_foreign_key(seeded_db.STUDENTS, 2)} == {12}

    def test_replace_is_atomic(self, seeded_db, sample_courses):
        """A bad row rolls the whole replacement back"""
        bad = sample_courses[1].to_row()
        bad["id"] = None
        with pytest.raises(ValueError):
            seeded_db.replace_all(seeded_db.COURSES, [sample_courses[0].to_row(), bad])

        assert seeded_db.get_ids(seeded_db.COURSES) == {1, 2}

    def test_delete_by_id_cascades(self, seeded_db):
        assert seeded_db.delete_by_id(seeded_db.COURSES, 1) is True
        assert seeded_db.get_by_foreign_key(seeded_db.STUDENTS, 1) == []
        assert seeded_db.count(seeded_db.STUDENTS) == 1

    def test_delete_missing_is_noop(self, seeded_db):
        assert seeded_db.delete_by_id(seeded_db.STUDENTS, 999) is False
        assert seeded_db.count(seeded_db.STUDENTS) == 3

    def test_delete_by_foreign_key(self, seeded_db):
        assert seeded_db.delete_by_foreign_key(seeded_db.STUDENTS, 1) == 2
        assert seeded_db.count(seeded_db.STUDENTS) == 1

    def test_clear_all(self, seeded_db):
        seeded_db.clear_all(seeded_db.STUDENTS)
        assert seeded_db.count(seeded_db.STUDENTS) == 0
        assert seeded_db.count(seeded_db.COURSES) == 2

    def test_student_needs_cached_course(self, local_db, sample_students):
        """The foreign key is enforced"""
        import sqlite3

        with pytest.raises(sqlite3.IntegrityError):
            local_db.upsert_many(local_db.STUDENTS, [sample_students[0].to_row()])


class TestLocalDatabasePandas:
    """DataFrame export"""

    def test_to_dataframe(self, seeded_db):
        df = seeded_db.to_dataframe(seeded_db.STUDENTS, where="course_id = ?", params=[1])

        assert list(df["name"]) == ["Ana Mora", "Luis Rojas"]
        assert "last_sync_timestamp" in df.columns
