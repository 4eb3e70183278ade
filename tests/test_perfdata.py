import json
import os
import threading

import pytest

from wasmsched.framework import Pod
from wasmsched.perfdata import (
    DataItem,
    DataItems,
    ThroughputCollector,
    data_items_to_json_file,
    get_scheduled_pods,
)


def test_data_item_omits_empty_labels():
    item = DataItem(data={"Perc50": 1.5}, unit="ms")
    assert item.to_dict() == {"data": {"Perc50": 1.5}, "unit": "ms"}


def test_data_item_includes_labels():
    item = DataItem(data={"Average": 2.0}, unit="ms", labels={"Metric": "m"})
    assert item.to_dict()["labels"] == {"Metric": "m"}


def test_data_items_to_dict():
    items = DataItems(version="v1", data_items=[DataItem(unit="ms")])
    out = items.to_dict()
    assert out["version"] == "v1"
    assert out["dataItems"] == [{"data": None, "unit": "ms"}]
    assert DataItems(version="v1").to_dict()["dataItems"] is None


def test_get_scheduled_pods_filters():
    pods = [
        Pod(name="a", namespace="ns1", node_name="n1"),
        Pod(name="b", namespace="ns2", node_name="n1"),
        Pod(name="c", namespace="ns1"),
    ]
    assert [p.name for p in get_scheduled_pods(pods)] == ["a", "b"]
    assert [p.name for p in get_scheduled_pods(pods, ["ns1"])] == ["a"]
    assert get_scheduled_pods(pods, ["other"]) == []


def test_collect_without_samples():
    collector = ThroughputCollector(labels={"Name": "x"})
    [item] = collector.collect()
    assert item.data is None
    assert item.labels == {"Name": "x"}
    assert item.unit == ""


def test_sample_ignores_zero():
    collector = ThroughputCollector()
    collector.sample(0)
    assert collector.throughputs == []


def test_single_sample_percentiles():
    collector = ThroughputCollector(labels={"Name": "x"})
    collector.sample(7)
    [item] = collector.collect()
    assert item.unit == "pods/s"
    assert item.labels["Metric"] == "SchedulingThroughput"
    assert set(item.data.values()) == {7}
    assert collector.labels == {"Name": "x"}


def test_collect_percentiles_are_ordered_samples():
    collector = ThroughputCollector()
    for scheduled in (5, 25, 30, 80, 81):
        collector.sample(scheduled)
    [item] = collector.collect()
    ordered = [item.data[k] for k in ("Perc50", "Perc90", "Perc95", "Perc99")]
    assert ordered == sorted(ordered)
    assert all(v in collector.throughputs for v in ordered)
    assert item.data["Perc99"] == max(collector.throughputs)
    assert min(collector.throughputs) <= item.data["Average"] <= max(collector.throughputs)


def test_run_samples_until_stopped():
    stop = threading.Event()
    counts = iter([0, 1, 2, 3])
    calls = []

    def list_pods():
        try:
            n = next(counts)
        except StopIteration:
            stop.set()
            n = 3
        calls.append(n)
        return [Pod(name=f"p{i}", node_name="n") for i in range(n)]

    collector = ThroughputCollector()
    collector.run(list_pods, stop, interval=0.001)
    assert stop.is_set()
    assert len(collector.throughputs) >= 3
    assert all(t >= 0 for t in collector.throughputs)


def test_json_file_round_trip(tmp_path):
    items = DataItems(
        version="v1",
        data_items=[DataItem(data={"Average": 2.0, "Perc50": 1.5}, unit="ms", labels={"Metric": "m"})],
    )
    target = tmp_path / "nested" / "dir"
    path = data_items_to_json_file(items, "Bench", str(target))
    assert os.path.dirname(path) == str(target)
    assert os.path.basename(path).startswith("Bench_")
    assert path.endswith(".json")
    with open(path, encoding="utf-8") as handle:
        text = handle.read()
    assert json.loads(text) == items.to_dict()
    assert '"Average": 2,' in text
    assert '\n  "version"' in text


def test_json_file_rejects_nan(tmp_path):
    items = DataItems(data_items=[DataItem(data={"Average": float("nan")})])
    with pytest.raises(ValueError):
        data_items_to_json_file(items, "Bench", str(tmp_path))