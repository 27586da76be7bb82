import os
import tempfile
from unittest import mock

from eventhub import qr
from eventhub.passes import VerificationResult
from tests.base import BaseTestCase


class PassesCliTests(BaseTestCase):
    def setUp(self):
        super().setUp()
        self.runner = self.app.test_cli_runner()
        self.tmpdir = tempfile.mkdtemp()
        self.png_path = os.path.join(self.tmpdir, "pass.png")

    def tearDown(self):
        if os.path.exists(self.png_path):
            os.remove(self.png_path)
        os.rmdir(self.tmpdir)
        super().tearDown()

    def test_qr_then_decode(self):
        r = self.runner.invoke(args=["passes", "qr", "p_cli123", "--output", self.png_path])
        self.assertEqual(r.exit_code, 0, r.output)
        self.assertIn("Wrote", r.output)

        r2 = self.runner.invoke(args=["passes", "decode", self.png_path])
        self.assertEqual(r2.exit_code, 0, r2.output)
        self.assertEqual(r2.output.strip(), "p_cli123")

    def test_decode_foreign_code_fails(self):
        with open(self.png_path, "wb") as fh:
            fh.write(qr.encode("https://example.com"))

        r = self.runner.invoke(args=["passes", "decode", self.png_path])
        self.assertNotEqual(r.exit_code, 0)
        self.assertIn("not a pass token", r.output)

    def test_scan_requires_url(self):
        with open(self.png_path, "wb") as fh:
            fh.write(qr.encode("p_cli123"))

        r = self.runner.invoke(args=["passes", "scan", self.png_path])
        self.assertNotEqual(r.exit_code, 0)
        self.assertIn("No pass service URL", r.output)

    def test_scan_reports_result(self):
        with open(self.png_path, "wb") as fh:
            fh.write(qr.encode("p_cli123"))

        with mock.patch(
            "eventhub.cli.PassServiceClient.verify",
            side_effect=[VerificationResult(True, 4, 9), VerificationResult(False)],
        ) as verify:
            r1 = self.runner.invoke(args=["passes", "scan", self.png_path, "--url", "http://passes.test"])
            r2 = self.runner.invoke(args=["passes", "scan", self.png_path, "--url", "http://passes.test"])

        self.assertEqual(r1.exit_code, 0, r1.output)
        self.assertEqual(r1.output.strip(), "valid user_id=4 event_id=9")
        self.assertEqual(r2.output.strip(), "invalid")
        verify.assert_called_with("p_cli123")

    def test_init_db(self):
        r = self.runner.invoke(args=["init-db"])
        self.assertEqual(r.exit_code, 0, r.output)
        self.assertIn("Database initialised.", r.output)
