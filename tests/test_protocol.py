#!/usr/bin/env python3
"""Unit tests for envelope helpers and the ChatMessage record."""

import json
import unittest
from datetime import datetime, timezone

from relaychat.protocol import (
    AUTH_REQUEST, BROADCAST, PRIVATE, ChatMessage, envelope_kind,
    format_timestamp, make_envelope, parse_envelope, parse_timestamp, utc_now,
)


class TestEnvelopes(unittest.TestCase):

    def test_make_envelope_sets_type(self):
        self.assertEqual(json.loads(make_envelope(AUTH_REQUEST)), {"type": "auth_request"})
        self.assertEqual(json.loads(make_envelope("auth", username="bob")),
                         {"type": "auth", "username": "bob"})

    def test_parse_envelope_rejects_plain_text(self):
        self.assertIsNone(parse_envelope("hello everyone"))
        self.assertIsNone(parse_envelope("{broken"))

    def test_parse_envelope_rejects_non_objects(self):
        self.assertIsNone(parse_envelope("42"))
        self.assertIsNone(parse_envelope('"hi"'))
        self.assertIsNone(parse_envelope("[1, 2]"))

    def test_parse_envelope_survives_deep_nesting(self):
        self.assertIsNone(parse_envelope("[" * 200000))
        self.assertIsNone(parse_envelope('{"a": ' * 200000))

    def test_parse_envelope_accepts_bytes(self):
        self.assertEqual(parse_envelope(b'{"type": "auth"}'), {"type": "auth"})

    def test_kind_field_aliases(self):
        self.assertEqual(envelope_kind({"type": "private"}), "private")
        self.assertEqual(envelope_kind({"kind": "private"}), "private")
        self.assertIsNone(envelope_kind({"content": "x"}))


class TestTimestamps(unittest.TestCase):

    def test_format_uses_z_and_milliseconds(self):
        ts = datetime(2024, 5, 1, 12, 0, 0, 123000, tzinfo=timezone.utc)
        self.assertEqual(format_timestamp(ts), "2024-05-01T12:00:00.123Z")

    def test_parse_z_suffix(self):
        ts = parse_timestamp("2024-05-01T12:00:00.123Z")
        self.assertEqual(ts, datetime(2024, 5, 1, 12, 0, 0, 123000, tzinfo=timezone.utc))

    def test_utc_now_is_millisecond_precise(self):
        now = utc_now()
        self.assertEqual(now.microsecond % 1000, 0)
        self.assertEqual(now.tzinfo, timezone.utc)


class TestChatMessage(unittest.TestCase):

    def test_broadcast_round_trip(self):
        original = ChatMessage(BROADCAST, "alice", "hi", utc_now())
        parsed = ChatMessage.from_envelope(original.to_envelope())
        self.assertEqual(parsed.sender, original.sender)
        self.assertEqual(parsed.content, original.content)
        self.assertEqual(parsed.timestamp, original.timestamp)
        self.assertEqual(parsed, original)

    def test_broadcast_dict_has_no_recipient(self):
        data = ChatMessage(BROADCAST, "alice", "hi", utc_now()).to_dict()
        self.assertEqual(set(data), {"type", "sender", "content", "timestamp"})
        self.assertEqual(data["type"], "broadcast")

    def test_private_carries_recipient(self):
        data = ChatMessage(PRIVATE, "alice", "secret", utc_now(), recipient="bob").to_dict()
        self.assertEqual(data["type"], "private")
        self.assertEqual(data["recipient"], "bob")

    def test_messages_are_immutable(self):
        msg = ChatMessage(BROADCAST, "alice", "hi", utc_now())
        with self.assertRaises(Exception):
            msg.content = "changed"

    def test_from_envelope_rejects_text(self):
        with self.assertRaises(ValueError):
            ChatMessage.from_envelope("not json")


if __name__ == "__main__":
    unittest.main()
