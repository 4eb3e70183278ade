"""Performance data points, scheduled-pod counting and throughput sampling."""

from __future__ import annotations

import json
import math
import os
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .framework import Pod

DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
THROUGHPUT_SAMPLE_FREQUENCY = 1.0
_PERCENTILES = (50, 90, 95, 99)


@dataclass
class DataItem:
    """One data point: buckets of values, their unit and identifying labels."""

    data: dict[str, float] | None = None
    unit: str = ""
    labels: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "data": None if self.data is None else {k: self.data[k] for k in sorted(self.data)},
            "unit": self.unit,
        }
        if self.labels:
            out["labels"] = {k: self.labels[k] for k in sorted(self.labels)}
        return out


@dataclass
class DataItems:
    """The set of data points in the form a perf dashboard expects."""

    version: str = "v1"
    data_items: list[DataItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "dataItems": [item.to_dict() for item in self.data_items] if self.data_items else None,
        }


def get_scheduled_pods(pods: Iterable[Pod], namespaces: Iterable[str] = ()) -> list[Pod]:
    """Pods bound to a node, restricted to ``namespaces`` unless that is empty."""
    wanted = set(namespaces)
    return [
        pod for pod in pods if pod.node_name and (not wanted or pod.namespace in wanted)
    ]


class ThroughputCollector:
    """Samples how many pods get scheduled per second."""

    def __init__(
        self,
        labels: dict[str, str] | None = None,
        namespaces: Iterable[str] = (),
        sample_interval: float = THROUGHPUT_SAMPLE_FREQUENCY,
    ) -> None:
        self.labels = dict(labels or {})
        self.namespaces = list(namespaces)
        self.sample_interval = sample_interval
        self.throughputs: list[float] = []
        self._last_scheduled = 0

    def sample(self, scheduled: int) -> None:
        """Record one sample given the current number of scheduled pods."""
        if scheduled > 0:
            self.throughputs.append((scheduled - self._last_scheduled) / self.sample_interval)
            self._last_scheduled = scheduled

    def run(
        self,
        list_pods: Callable[[], Iterable[Pod]],
        stop_event: threading.Event,
        interval: float | None = None,
    ) -> None:
        """Sample every ``interval`` seconds until ``stop_event`` is set."""
        if interval is not None:
            self.sample_interval = interval
        self._last_scheduled = len(get_scheduled_pods(list_pods(), self.namespaces))
        while not stop_event.wait(self.sample_interval):
            self.sample(len(get_scheduled_pods(list_pods(), self.namespaces)))

    def collect(self) -> list[DataItem]:
        summary = DataItem(labels=dict(self.labels))
        length = len(self.throughputs)
        if length:
            ordered = sorted(self.throughputs)
            summary.labels["Metric"] = "SchedulingThroughput"
            summary.data = {"Average": sum(ordered) / length}
            for pct in _PERCENTILES:
                summary.data[f"Perc{pct}"] = ordered[math.ceil(length * pct / 100) - 1]
            summary.unit = "pods/s"
        return [summary]


def _go_numbers(value: Any) -> Any:
    """Render integral floats without a fraction, as the dashboard format does."""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    if isinstance(value, dict):
        return {k: _go_numbers(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_go_numbers(v) for v in value]
    return value


def data_items_to_json_file(
    data_items: DataItems, name_prefix: str, data_items_dir: str = ""
) -> str:
    """Write the data items as indented JSON and return the file's path."""
    payload = json.dumps(_go_numbers(data_items.to_dict()), indent=2, allow_nan=False)
    dest = f"{name_prefix}_{datetime.now().strftime(DATE_FORMAT)}.json"
    if data_items_dir:
        try:
            os.makedirs(data_items_dir, mode=0o750, exist_ok=True)
        except OSError as exc:
            raise OSError(
                f"dataItemsDir path {data_items_dir} does not exist and cannot be created: {exc}"
            ) from exc
        dest = os.path.join(data_items_dir, dest)
    with open(dest, "w", encoding="utf-8") as handle:
        handle.write(payload)
    return dest