"""
MemKV Observability & Metrics

- Command-level latency and error tracking
- Real-time throughput measurement
- Prometheus and JSON export combined with store statistics
- Structured JSON logging
"""

import json
import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional


@dataclass
class CommandMetrics:
    """Metrics for a specific command type."""
    name: str
    count: int = 0
    total_latency_ms: float = 0.0
    min_latency_ms: float = float('inf')
    max_latency_ms: float = 0.0
    error_count: int = 0

    @property
    def avg_latency_ms(self) -> float:
        """Average latency in milliseconds."""
        if self.count == 0:
            return 0.0
        return self.total_latency_ms / self.count

    def record(self, latency_ms: float, error: bool = False):
        """Record a command execution."""
        self.count += 1
        self.total_latency_ms += latency_ms
        self.min_latency_ms = min(self.min_latency_ms, latency_ms)
        self.max_latency_ms = max(self.max_latency_ms, latency_ms)
        if error:
            self.error_count += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON export."""
        return {
            "name": self.name,
            "count": self.count,
            "error_count": self.error_count,
            "avg_latency_ms": round(self.avg_latency_ms, 3),
            "min_latency_ms": round(self.min_latency_ms, 3) if self.min_latency_ms != float('inf') else 0,
            "max_latency_ms": round(self.max_latency_ms, 3),
        }


class MetricsCollector:
    """
    Centralized metrics collection and aggregation.

    Tracks per-command latency (STRINGS_SET, LISTS_POP, ...), error counts
    and throughput over a sliding window.
    """

    def __init__(self, throughput_window_secs: int = 60):
        self.command_metrics: Dict[str, CommandMetrics] = {}
        self.metrics_lock = threading.RLock()

        self.throughput_window_secs = throughput_window_secs
        self.operation_timestamps: deque = deque()

        self.start_time = time.time()

    def record_command(
        self,
        command_name: str,
        latency_ms: float,
        error: bool = False
    ) -> None:
        """
        Record a command execution.

        Args:
            command_name: Command name
            latency_ms: Execution time in milliseconds
            error: Whether command resulted in error
        """
        with self.metrics_lock:
            if command_name not in self.command_metrics:
                self.command_metrics[command_name] = CommandMetrics(command_name)

            self.command_metrics[command_name].record(latency_ms, error)

            current_time = time.time()
            self.operation_timestamps.append(current_time)
            while self.operation_timestamps and \
                  (current_time - self.operation_timestamps[0]) > self.throughput_window_secs:
                self.operation_timestamps.popleft()

    def get_throughput_ops_sec(self) -> float:
        """Get current throughput in operations per second."""
        with self.metrics_lock:
            if len(self.operation_timestamps) > 1:
                time_diff = self.operation_timestamps[-1] - self.operation_timestamps[0]
                if time_diff > 0:
                    return len(self.operation_timestamps) / time_diff

        return 0.0

    def get_command_metrics(self, command: Optional[str] = None) -> Dict[str, Any]:
        """
        Get metrics for a specific command or all commands.

        Args:
            command: Command name, or None for all
        """
        with self.metrics_lock:
            if command:
                if command in self.command_metrics:
                    return self.command_metrics[command].to_dict()
                return {}

            return {
                cmd: metrics.to_dict()
                for cmd, metrics in self.command_metrics.items()
            }

    def export_prometheus(self, stores: Iterable[Any]) -> str:
        """
        Export metrics in Prometheus format.

        Args:
            stores: Stores exposing info(), reported per store label
        """
        uptime = time.time() - self.start_time

        lines = [
            "# HELP memkv_uptime_seconds Server uptime in seconds",
            "# TYPE memkv_uptime_seconds counter",
            f"memkv_uptime_seconds {uptime}",
            "",
            "# HELP memkv_operations_per_sec Current throughput",
            "# TYPE memkv_operations_per_sec gauge",
            f"memkv_operations_per_sec {self.get_throughput_ops_sec():.2f}",
            "",
        ]

        store_infos = [store.info() for store in stores]
        for metric, kind, help_text in (
            ("keys", "gauge", "Live keys"),
            ("sets_total", "counter", "Total inserts"),
            ("gets_total", "counter", "Total reads"),
            ("updates_total", "counter", "Total updates"),
            ("removes_total", "counter", "Total removals"),
            ("expirations_total", "counter", "Total keys removed on expiry"),
        ):
            lines.append(f"# HELP memkv_{metric} {help_text}")
            lines.append(f"# TYPE memkv_{metric} {kind}")
            for info in store_infos:
                lines.append(f"memkv_{metric}{{store=\"{info['store']}\"}} {info.get(metric, 0)}")
            lines.append("")

        with self.metrics_lock:
            for cmd_name, cmd_metrics in self.command_metrics.items():
                cmd_lower = cmd_name.lower()
                lines.extend([
                    f"# HELP memkv_cmd_{cmd_lower}_count Total executions",
                    f"# TYPE memkv_cmd_{cmd_lower}_count counter",
                    f"memkv_cmd_{cmd_lower}_count {cmd_metrics.count}",
                    "",
                    f"# HELP memkv_cmd_{cmd_lower}_errors Failed executions",
                    f"# TYPE memkv_cmd_{cmd_lower}_errors counter",
                    f"memkv_cmd_{cmd_lower}_errors {cmd_metrics.error_count}",
                    "",
                    f"# HELP memkv_cmd_{cmd_lower}_latency_ms Average latency",
                    f"# TYPE memkv_cmd_{cmd_lower}_latency_ms gauge",
                    f"memkv_cmd_{cmd_lower}_latency_ms {cmd_metrics.avg_latency_ms:.3f}",
                    "",
                ])

        return "\n".join(lines)

    def export_json(self, stores: Iterable[Any]) -> Dict[str, Any]:
        """Export metrics as a JSON-serializable dictionary."""
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": time.time() - self.start_time,
            "stores": {info["store"]: info for info in (store.info() for store in stores)},
            "throughput": {
                "ops_per_sec": self.get_throughput_ops_sec(),
                "window_secs": self.throughput_window_secs,
            },
            "commands": self.get_command_metrics(),
        }

    def reset_stats(self) -> None:
        """Reset all metrics."""
        with self.metrics_lock:
            self.command_metrics.clear()
            self.operation_timestamps.clear()


class StructuredLogger:
    """
    Structured JSON logging for production observability.

    Logs important events in JSON format for easy parsing by log aggregation.
    """

    def __init__(self, name: str = "memkv"):
        self.logger = logging.getLogger(name)

    def log_command(
        self,
        command: str,
        key: str,
        status: str,
        latency_ms: float,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log a command execution.

        Args:
            command: Command name
            key: Key involved
            status: "success" or the error kind
            latency_ms: Execution time
            details: Optional additional details
        """
        log_entry = {
            "event": "command_executed",
            "command": command,
            "key": key,
            "status": status,
            "latency_ms": round(latency_ms, 3),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        if details:
            log_entry.update(details)

        self.logger.info(json.dumps(log_entry))

    def log_startup(self, config: Dict[str, Any]) -> None:
        """Log startup event."""
        log_entry = {
            "event": "server_started",
            "config": config,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        self.logger.info(json.dumps(log_entry))

    def log_shutdown(self, reason: str, final_stats: Dict[str, Any]) -> None:
        """Log shutdown event."""
        log_entry = {
            "event": "server_shutdown",
            "reason": reason,
            "final_stats": final_stats,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        self.logger.info(json.dumps(log_entry))
