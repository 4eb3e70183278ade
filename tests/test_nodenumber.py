import pytest

from wasmsched.framework import (
    CycleState,
    Node,
    NodeInfo,
    Pod,
    StatusCode,
    run_all,
)
from wasmsched.nodenumber import (
    PRE_SCORE_STATE_KEY,
    NodeNumber,
    WasmNodeNumber,
    last_number,
    new_node_number,
    new_wasm_node_number,
    suffix_number,
)


class _Log:
    def __init__(self):
        self.lines = []

    def info(self, msg):
        self.lines.append(msg)


def test_last_number_only_considers_last_char():
    assert last_number("Node99") == last_number("Node9") == 9
    assert last_number("") is None
    assert last_number("node") is None


@pytest.mark.parametrize("name", ["pod0", "pod3", "node7"])
def test_suffix_number_for_digits_matches_last_number(name):
    assert suffix_number(name) == last_number(name)


@pytest.mark.parametrize("name", ["x", "happy8-meta", "nodé"])
def test_suffix_number_non_digit_in_range(name):
    assert 0 <= suffix_number(name) < 10


def test_suffix_number_empty_raises():
    with pytest.raises(ValueError):
        suffix_number("")


def test_node_number_name_and_events():
    plugin = NodeNumber()
    assert plugin.name() == "NodeNumber"
    events = plugin.events_to_register()
    assert [(e.resource, e.action_type) for e in events] == [("Node", "Add")]


def _score(plugin, pod_name, node_name):
    state = CycleState()
    assert plugin.pre_score(state, Pod(pod_name), []) is None
    return plugin.score(state, Pod(pod_name), node_name)


def test_node_number_favours_matching_suffix():
    plugin = new_node_number(None)
    assert _score(plugin, "Pod1", "Node1") == (10, None)
    assert _score(plugin, "Pod1", "Node9") == (0, None)


def test_node_number_reverse():
    plugin = new_node_number({"reverse": True})
    assert _score(plugin, "Pod1", "Node1") == (0, None)
    assert _score(plugin, "Pod1", "Node9") == (10, None)


def test_node_number_without_pre_score_state():
    assert NodeNumber().score(CycleState(), Pod("Pod1"), "Node1") == (0, None)


def test_node_number_wrong_state_type():
    state = CycleState()
    state.write(PRE_SCORE_STATE_KEY, "not a state")
    score, status = NodeNumber().score(state, Pod("Pod1"), "Node1")
    assert score == 0
    assert status.code == StatusCode.ERROR
    assert "unexpected pre score state" in status.reason


def test_new_node_number_rejects_bad_args():
    with pytest.raises(ValueError):
        new_node_number(["reverse"])
    with pytest.raises(ValueError):
        new_node_number({"reverse": "yes"})


POD = Pod(name="happy8-meta", node_name="happy8")


def _node(name):
    return NodeInfo(Node(name))


def test_wasm_score_zero_on_unmatch():
    plugin = new_wasm_node_number(_Log(), '{"reverse": false}')
    assert run_all(plugin, CycleState(), POD, _node("glad9"), None) == 0


def test_wasm_score_ten_on_match():
    plugin = new_wasm_node_number(_Log(), None)
    assert run_all(plugin, CycleState(), POD, _node("glad8"), None) == 10


def test_wasm_reverse_means_zero_on_match():
    log = _Log()
    plugin = new_wasm_node_number(log, '{"reverse": true}')
    assert run_all(plugin, CycleState(), POD, _node("glad8"), None) == 0
    assert log.lines == ["NodeNumberArgs is successfully applied"]


def test_wasm_no_config_logs_nothing():
    log = _Log()
    plugin = new_wasm_node_number(log, None)
    assert plugin.reverse is False
    assert log.lines == []


def test_wasm_pod_without_digit_matches_everything():
    plugin = WasmNodeNumber()
    pod = Pod(name="p", node_name="")
    assert run_all(plugin, CycleState(), pod, _node("glad9"), None) == 10


def test_wasm_invalid_json_raises():
    with pytest.raises(ValueError):
        new_wasm_node_number(_Log(), "{not json")