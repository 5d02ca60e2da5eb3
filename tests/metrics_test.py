"""MetricsCollector and StructuredLogger tests."""

import json
import unittest

from memkv.list_store import ListStore
from memkv.metrics import CommandMetrics, MetricsCollector, StructuredLogger
from memkv.string_store import StringStore


class CommandMetricsTest(unittest.TestCase):

    def test_record(self):
        metrics = CommandMetrics("STRINGS_GET")
        metrics.record(2.0)
        metrics.record(4.0, error=True)

        exported = metrics.to_dict()
        self.assertEqual(exported["count"], 2)
        self.assertEqual(exported["error_count"], 1)
        self.assertEqual(exported["avg_latency_ms"], 3.0)
        self.assertEqual(exported["min_latency_ms"], 2.0)
        self.assertEqual(exported["max_latency_ms"], 4.0)

    def test_empty_min_latency_exports_zero(self):
        self.assertEqual(CommandMetrics("X").to_dict()["min_latency_ms"], 0)


class MetricsCollectorTest(unittest.TestCase):

    def setUp(self):
        self.collector = MetricsCollector()
        self.strings = StringStore()
        self.lists = ListStore()
        self.strings.set("a", "1")
        self.lists.set("q", ["x"])
        self.lists.push("q", "y")

    def test_export_prometheus(self):
        self.collector.record_command("LISTS_PUSH", 0.5)

        output = self.collector.export_prometheus([self.strings, self.lists])
        self.assertIn('memkv_keys{store="strings"} 1', output)
        self.assertIn('memkv_keys{store="lists"} 1', output)
        self.assertIn("memkv_cmd_lists_push_count 1", output)
        self.assertIn("memkv_cmd_lists_push_errors 0", output)

    def test_export_json(self):
        self.collector.record_command("STRINGS_SET", 1.0)

        exported = self.collector.export_json([self.strings, self.lists])
        self.assertEqual(exported["stores"]["lists"]["pushes_total"], 1)
        self.assertEqual(exported["commands"]["STRINGS_SET"]["count"], 1)
        json.dumps(exported)

    def test_reset_stats(self):
        self.collector.record_command("STRINGS_SET", 1.0)
        self.collector.reset_stats()
        self.assertEqual(self.collector.get_command_metrics(), {})
        self.assertEqual(self.collector.get_throughput_ops_sec(), 0.0)


class StructuredLoggerTest(unittest.TestCase):

    def test_log_command_emits_json(self):
        structured = StructuredLogger("memkv.test")

        with self.assertLogs("memkv.test", level="INFO") as logs:
            structured.log_command("STRINGS_GET", "foo", "NotFoundError", 0.1234, {"ttl": None})

        entry = json.loads(logs.records[0].getMessage())
        self.assertEqual(entry["event"], "command_executed")
        self.assertEqual(entry["status"], "NotFoundError")
        self.assertEqual(entry["latency_ms"], 0.123)
        self.assertIn("ttl", entry)


if __name__ == "__main__":
    unittest.main()
