"""
Tests for CLI entry points.

These tests focus on:
- argument validation that must not touch the network (blank chat prompt)
- session cookie persistence through a temporary session file
  (to avoid touching the real ~/.nounsuccess/session.json)
- offline behaviour against an unreachable API (127.0.0.1:9)
"""

import tempfile
import unittest
from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path

from nounsuccess.cli import build_parser, main
from nounsuccess.model import SessionUser
from nounsuccess.storage import SessionData, load_session, save_session


class TestCLI(unittest.TestCase):
    def test_chat_send_requires_prompt(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            session = str(Path(d) / "session.json")
            with redirect_stdout(StringIO()), self.assertRaises(SystemExit) as ctx:
                main(["--session", session, "--api-url", "http://127.0.0.1:9", "chat", "send", "   "])
        self.assertNotEqual(ctx.exception.code, 0)

    def test_session_cookie_roundtrip(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "session.json"
            with redirect_stdout(StringIO()), self.assertRaises(SystemExit) as ctx:
                main(["--session", str(p), "session", "cookie", "connect.sid=abc123"])
            self.assertEqual(ctx.exception.code, 0)
            self.assertEqual(load_session(p).cookies, {"connect.sid": "abc123"})

            with redirect_stdout(StringIO()), self.assertRaises(SystemExit) as ctx:
                main(["--session", str(p), "session", "clear"])
            self.assertEqual(ctx.exception.code, 0)
            self.assertFalse(p.exists())

    def test_session_cookie_needs_name_value(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "session.json"
            with redirect_stdout(StringIO()), self.assertRaises(SystemExit) as ctx:
                main(["--session", str(p), "session", "cookie", "novalue"])
            self.assertEqual(ctx.exception.code, 1)

    def test_whoami_offline_keeps_stored_user(self) -> None:
        user = SessionUser(id=1, first_name="Ada", email="ada@noun.edu.ng")
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "session.json"
            save_session(SessionData(cookies={"connect.sid": "abc"}, user=user), p)
            out = StringIO()
            with redirect_stdout(out), self.assertRaises(SystemExit) as ctx:
                main(["--session", str(p), "--api-url", "http://127.0.0.1:9", "--timeout", "2", "whoami"])
            self.assertEqual(ctx.exception.code, 0)
            self.assertIn("Ada <ada@noun.edu.ng>", out.getvalue())
            self.assertEqual(load_session(p).user, user)
            self.assertEqual(load_session(p).cookies, {"connect.sid": "abc"})

    def test_materials_search_offline_shows_no_match(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            session = str(Path(d) / "session.json")
            out = StringIO()
            with redirect_stdout(out), self.assertRaises(SystemExit) as ctx:
                main(["--session", session, "--api-url", "http://127.0.0.1:9", "--timeout", "2",
                      "materials", "--search", "calculus"])
        self.assertEqual(ctx.exception.code, 0)
        self.assertIn("No materials match your search criteria.", out.getvalue())

    def test_materials_defaults(self) -> None:
        args = build_parser().parse_args(["materials"])
        self.assertIsNone(args.search)
        self.assertEqual(args.limit, 6)

    def test_command_required(self) -> None:
        with redirect_stdout(StringIO()), self.assertRaises(SystemExit):
            build_parser().parse_args([])


if __name__ == "__main__":
    unittest.main()
