#!/usr/bin/env python3
"""Tests for the command-line wiring and the client's input grammar."""

import json
import unittest
from unittest.mock import patch

from relaychat import cli
from relaychat.client import compose_outbound, local_time


class TestParser(unittest.TestCase):

    def test_defaults(self):
        args = cli.build_parser().parse_args(["start"])
        self.assertEqual((args.command, args.host, args.port), ("start", "localhost", 8765))
        self.assertFalse(args.notify_missing_recipient)

    def test_connect_overrides(self):
        args = cli.build_parser().parse_args(["connect", "--host", "10.0.0.5", "--port", "9000"])
        self.assertEqual((args.command, args.host, args.port), ("connect", "10.0.0.5", 9000))

    def test_subcommand_required(self):
        with patch("sys.stderr"):
            with self.assertRaises(SystemExit) as ctx:
                cli.build_parser().parse_args([])
        self.assertEqual(ctx.exception.code, 2)

    def test_unknown_subcommand(self):
        with patch("sys.stderr"):
            with self.assertRaises(SystemExit) as ctx:
                cli.build_parser().parse_args(["serve"])
        self.assertEqual(ctx.exception.code, 2)


class TestMain(unittest.TestCase):

    def setUp(self):
        patcher = patch.object(cli, "configure_logging")
        self.configure_logging = patcher.start()
        self.addCleanup(patcher.stop)

    def test_start_exits_zero_after_shutdown(self):
        with patch("relaychat.server.RelayServer") as server_cls:
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["start", "--port", "9999", "--notify-missing-recipient"])
        server_cls.assert_called_once_with("localhost", 9999, True)
        server_cls.return_value.start.assert_called_once_with()
        self.assertEqual(ctx.exception.code, 0)

    def test_start_exits_one_when_port_busy(self):
        with patch("relaychat.server.RelayServer") as server_cls:
            server_cls.return_value.start.side_effect = OSError(98, "Address already in use")
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["start", "--log-file", ""])
        self.assertEqual(ctx.exception.code, 1)
        self.assertIsNone(self.configure_logging.call_args.args[1])

    def test_connect_builds_ws_uri(self):
        with patch("relaychat.client.RelayClient") as client_cls:
            client_cls.return_value.start.return_value = 0
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["connect", "--host", "example.org", "--port", "1234"])
        client_cls.assert_called_once_with("ws://example.org:1234")
        self.assertEqual(ctx.exception.code, 0)


class TestComposeOutbound(unittest.TestCase):

    def test_plain_line_sent_raw(self):
        self.assertEqual(compose_outbound("hello everyone"), "hello everyone")

    def test_private_line(self):
        frame = json.loads(compose_outbound("@bob see you at 5"))
        self.assertEqual(frame, {"type": "private", "recipient": "bob", "content": "see you at 5"})

    def test_private_without_text(self):
        frame = json.loads(compose_outbound("@bob"))
        self.assertEqual((frame["recipient"], frame["content"]), ("bob", ""))

    def test_blank_line_ignored(self):
        self.assertIsNone(compose_outbound("   "))


class TestLocalTime(unittest.TestCase):

    def test_formats_clock_time(self):
        self.assertRegex(local_time("2024-05-01T12:00:00.123Z"), r"^\d\d:\d\d:\d\d$")

    def test_garbage_timestamp(self):
        self.assertEqual(local_time("yesterday"), "??:??:??")
        self.assertEqual(local_time(None), "??:??:??")


if __name__ == "__main__":
    unittest.main()
