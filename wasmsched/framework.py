"""Core scheduling-framework types and a driver that runs every extension point."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Iterator


class StatusCode(IntEnum):
    """Result codes of a scheduling extension point."""

    SUCCESS = 0
    ERROR = 1
    UNSCHEDULABLE = 2
    UNSCHEDULABLE_AND_UNRESOLVABLE = 3
    WAIT = 4
    SKIP = 5
    PENDING = 6


@dataclass(frozen=True)
class Status:
    """Outcome of an extension point. ``None`` in place of a status means success."""

    code: StatusCode = StatusCode.SUCCESS
    reason: str = ""

    def is_success(self) -> bool:
        return self.code == StatusCode.SUCCESS


class StatusError(Exception):
    """Raised when an extension point did not report success."""

    def __init__(self, status: Status) -> None:
        self.status = status
        super().__init__(
            f"unexpected status code: want {StatusCode.SUCCESS.name}, "
            f"have {StatusCode(status.code).name}, reason: {status.reason}"
        )


class CycleState:
    """Key/value state shared by the extension points of one scheduling cycle."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def read(self, key: str) -> Any:
        """Return the value stored under ``key``; raise KeyError if absent."""
        return self._values[key]

    def write(self, key: str, value: Any) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


@dataclass(frozen=True)
class ClusterEvent:
    """A cluster event a plugin wants to be requeued on."""

    resource: str
    action_type: str


@dataclass
class Node:
    name: str
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class Pod:
    name: str
    namespace: str = ""
    uid: str = ""
    node_name: str = ""


@dataclass
class NodeInfo:
    node: Node


def require_success(status: Status | None) -> None:
    """Raise StatusError unless ``status`` is None or a success."""
    if status is not None and not status.is_success():
        raise StatusError(status)


def _method(plugin: Any, name: str):
    method = getattr(plugin, name, None)
    return method if callable(method) else None


def maybe_run_pre_filter(plugin: Any, state: CycleState | None, pod: Pod) -> None:
    """Ask for registered events and run pre-filter if the plugin has one."""
    plugin.events_to_register()
    pre_filter = _method(plugin, "pre_filter")
    if pre_filter is not None:
        _, status = pre_filter(state, pod)
        require_success(status)


def _run_pre_filter_extensions(plugin, state, pod, node_info, pod_info) -> None:
    add_pod = _method(plugin, "add_pod")
    remove_pod = _method(plugin, "remove_pod")
    if add_pod is not None and remove_pod is not None:
        require_success(add_pod(state, pod, pod_info, node_info))
        require_success(remove_pod(state, pod, pod_info, node_info))


def run_all(
    plugin: Any,
    state: CycleState | None,
    pod: Pod,
    node_info: NodeInfo,
    pod_info: Any,
) -> int:
    """Run every extension point the plugin implements and return its score."""
    if state is None:
        state = CycleState()
    score = 0
    node_name = node_info.node.name

    maybe_run_pre_filter(plugin, state, pod)

    if (filter_ := _method(plugin, "filter")) is not None:
        require_success(filter_(state, pod, node_info))

    if (post_filter := _method(plugin, "post_filter")) is not None:
        _, status = post_filter(state, pod, None)
        require_success(status)

    _run_pre_filter_extensions(plugin, state, pod, node_info, pod_info)

    if (pre_score := _method(plugin, "pre_score")) is not None:
        require_success(pre_score(state, pod, [node_info]))

    if (score_fn := _method(plugin, "score")) is not None:
        score, status = score_fn(state, pod, node_name)
        require_success(status)

    if (normalize := _method(plugin, "normalize_score")) is not None:
        require_success(normalize(state, pod, None))

    reserve = _method(plugin, "reserve")
    unreserve = _method(plugin, "unreserve")
    if reserve is not None and unreserve is not None:
        require_success(reserve(state, pod, node_name))
        unreserve(state, pod, node_name)

    if (permit := _method(plugin, "permit")) is not None:
        status, _ = permit(state, pod, node_name)
        require_success(status)

    if (pre_bind := _method(plugin, "pre_bind")) is not None:
        require_success(pre_bind(state, pod, ""))

    if (bind := _method(plugin, "bind")) is not None:
        require_success(bind(state, pod, ""))

    if (post_bind := _method(plugin, "post_bind")) is not None:
        post_bind(state, pod, "")

    _run_pre_filter_extensions(plugin, state, pod, node_info, pod_info)
    return score