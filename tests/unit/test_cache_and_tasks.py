# =============================================================================
# tests/unit/test_cache_and_tasks.py
# Unit Tests for image staging and the cancellable task runner
# =============================================================================

import io
import threading

import pytest


class TestImageStaging:
    """CacheManager.stage_image"""

    def test_stage_bytes(self, cache_manager):
        staged = cache_manager.stage_image(b"\x89PNG data", suffix=".png")

        assert staged.exists()
        assert staged.name.startswith("img_")
        assert staged.suffix == ".png"
        assert staged.read_bytes() == b"\x89PNG data"

    def test_stage_uploaded_file(self, cache_manager):
        """Streamlit uploads expose getvalue() and a name"""
        upload = io.BytesIO(b"jpeg bytes")
        upload.name = "Photo.JPG"
        staged = cache_manager.stage_image(upload)

        assert staged.suffix == ".jpg"
        assert staged.read_bytes() == b"jpeg bytes"

    def test_stage_path(self, cache_manager, tmp_path):
        source = tmp_path / "pic.webp"
        source.write_bytes(b"webp")

        assert cache_manager.stage_image(source).read_bytes() == b"webp"

    def test_missing_file_raises(self, cache_manager, tmp_path):
        from course_core.errors import LocalResourceError

        with pytest.raises(LocalResourceError) as exc:
            cache_manager.stage_image(tmp_path / "gone.jpg")
        assert exc.value.message == "Error processing image file"
        assert list(cache_manager.images_dir.iterdir()) == []

    def test_empty_image_raises(self, cache_manager):
        from course_core.errors import LocalResourceError

        with pytest.raises(LocalResourceError):
            cache_manager.stage_image(b"")

    def test_release(self, cache_manager):
        staged = cache_manager.stage_image(b"x")
        cache_manager.release(staged)
        cache_manager.release(None)

        assert not staged.exists()
        assert cache_manager.get_cache_stats()["staged_images"] == 0

    def test_cleanup_expired_removes_only_old_files(self, cache_manager):
        import os
        import time

        stale = cache_manager.stage_image(b"left behind")
        fresh = cache_manager.stage_image(b"uploading now")
        two_days_ago = time.time() - 2 * 24 * 3600
        os.utime(stale, (two_days_ago, two_days_ago))

        assert cache_manager.cleanup_expired() == 1
        assert not stale.exists()
        assert fresh.exists()


class TestSyncTaskRunner:
    """Cancellation tokens and the executor"""

    def test_submit_passes_token(self):
        from course_core.offline.task_runner import CancelToken, SyncTaskRunner

        runner = SyncTaskRunner(max_workers=1)
        task = runner.submit(lambda value, cancel_token: (value, cancel_token), 5)
        value, token = task.result(timeout=5)

        assert value == 5
        assert isinstance(token, CancelToken)
        runner.shutdown()

    def test_cancel_running_task(self):
        from course_core.errors import OperationCancelled
        from course_core.offline.task_runner import SyncTaskRunner

        started, release = threading.Event(), threading.Event()

        def work(cancel_token):
            started.set()
            release.wait(timeout=5)
            cancel_token.raise_if_cancelled()
            return "finished"

        runner = SyncTaskRunner(max_workers=1)
        task = runner.submit(work)
        started.wait(timeout=5)

        assert runner.cancel_all() == 1
        release.set()
        with pytest.raises(OperationCancelled):
            task.result(timeout=5)
        assert task.cancelled
        runner.shutdown()

    def test_cancel_before_start(self):
        from course_core.offline.task_runner import SyncTaskRunner

        gate = threading.Event()
        runner = SyncTaskRunner(max_workers=1)
        blocker = runner.submit(lambda cancel_token: gate.wait(timeout=5))
        queued = runner.submit(lambda cancel_token: "ran")

        assert queued.cancel() is True
        gate.set()
        blocker.result(timeout=5)
        assert queued.future.cancelled()
        runner.shutdown()
