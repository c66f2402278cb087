import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from repositories.agency_store import AgencyStore
from repositories.key_value_cache import JsonFileCache
from scripts.transfer_agency_data import main
from tenancy import TenantContext


class TransferAgencyDataScriptTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = AgencyStore(JsonFileCache(os.path.join(self.tmp.name, "cache.json")))
        self.logs_dir = os.path.join(self.tmp.name, "logs")
        self.ctx = TenantContext(principal={"id": "agency-x", "agencyId": "agency-x"})

    def tearDown(self):
        self.tmp.cleanup()

    def _run(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(list(argv) + ["--logs-dir", self.logs_dir], store=self.store)
        return code, json.loads(out.getvalue())

    def test_export_then_import_into_another_agency(self):
        self.store.save(self.ctx, "invoices", [{"id": "i1"}, {"id": "i2"}])
        target = os.path.join(self.tmp.name, "backup", "agency.json")

        code, result = self._run("export", "--agency-id", "agency-x", "--output", target)
        self.assertEqual(code, 0)
        self.assertEqual(result["counts"]["invoices"], 2)
        self.assertTrue(os.path.isfile(target))

        code, result = self._run("import", "--agency-id", "agency-y", "--input", target)
        self.assertEqual(code, 0)
        self.assertTrue(result["success"])
        other = TenantContext(principal={"id": "agency-y", "agencyId": "agency-y"})
        self.assertEqual(self.store.fetch(other, "invoices"), [{"id": "i1"}, {"id": "i2"}])

    def test_import_of_malformed_file_fails(self):
        bad = os.path.join(self.tmp.name, "bad.json")
        with open(bad, "w", encoding="utf-8") as fh:
            fh.write("{oops")
        code, result = self._run("import", "--agency-id", "agency-x", "--input", bad)
        self.assertEqual(code, 1)
        self.assertFalse(result["success"])

    def test_import_of_missing_file_fails(self):
        code, result = self._run("import", "--agency-id", "agency-x", "--input", "/nonexistent/file.json")
        self.assertEqual(code, 1)
        self.assertIn("error", result)


if __name__ == "__main__":
    unittest.main()
