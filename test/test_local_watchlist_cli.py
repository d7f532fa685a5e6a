import io
import json
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from infrastructure.integrations.local_watchlist.main import run


class TestLocalWatchlistCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = str(Path(self._tmp.name) / "local_storage.json")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        with redirect_stdout(out):
            code = run(["--path", self.path, *argv])
        return code, out.getvalue()

    def test_add_list_remove(self) -> None:
        self.assertEqual(self._run("add", "550")[0], 0)
        self.assertEqual(self._run("add", "1399", "--type", "tv")[0], 0)

        code, out = self._run("add", "550")
        self.assertEqual(code, 0)
        self.assertIn("already saved movie:550", out)

        code, out = self._run("list", "--no-details")
        self.assertEqual(code, 0)
        self.assertEqual(out.splitlines(), ["movie:550", "tv:1399"])

        code, out = self._run("remove", "550")
        self.assertIn("removed movie:550", out)
        self.assertEqual(self._run("list", "--no-details")[1].splitlines(), ["tv:1399"])

        slots = json.loads(Path(self.path).read_text(encoding="utf-8"))
        self.assertEqual(json.loads(slots["cinexp_watchlist_v2"]), [{"type": "tv", "id": 1399}])

    def test_clear(self) -> None:
        self._run("add", "1")
        self.assertEqual(self._run("clear"), (0, "cleared\n"))
        self.assertEqual(self._run("list", "--no-details")[1], "(empty)\n")

    def test_invalid_id_exit_code(self) -> None:
        code, _ = self._run("add", "abc")
        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()
