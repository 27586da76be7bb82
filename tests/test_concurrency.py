import os
import shutil
import tempfile
import threading

from eventhub.extensions import db
from eventhub.passes import PassStore
from tests.base import BaseTestCase

THREADS = 6


class ConcurrentVerifyTests(BaseTestCase):
    """Racing verifications against a file-backed database."""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.config = {"SQLALCHEMY_DATABASE_URI": "sqlite:///" + os.path.join(self.tmpdir, "passes.db")}
        super().setUp()

    def tearDown(self):
        super().tearDown()
        with self.app.app_context():
            db.engine.dispose()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _race(self, target):
        barrier = threading.Barrier(THREADS)
        results, errors = [], []
        lock = threading.Lock()

        def worker():
            with self.app.app_context():
                barrier.wait()
                try:
                    value = target()
                except Exception as e:
                    with lock:
                        errors.append(e)
                    return
                with lock:
                    results.append(value)

        threads = [threading.Thread(target=worker) for _ in range(THREADS)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)
        return results, errors

    def test_only_one_verification_wins(self):
        with self.app.app_context():
            PassStore().insert("p_race", 42, 7)

        results, errors = self._race(lambda: PassStore().verify("p_race"))

        self.assertEqual(errors, [])
        self.assertEqual(len(results), THREADS)
        self.assertEqual(sum(1 for r in results if r.valid), 1)

        winner = next(r for r in results if r.valid)
        self.assertEqual((winner.user_id, winner.event_id), (42, 7))
