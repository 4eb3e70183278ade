"""Plugins that favour nodes whose name ends in the same digit as the pod's."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .framework import ClusterEvent, CycleState, Pod, Status, StatusCode

NAME = "NodeNumber"
PRE_SCORE_STATE_KEY = "PreScore" + NAME
MATCH_SCORE = 10
NON_MATCH_SCORE = 0


@dataclass(frozen=True)
class _PreScoreState:
    pod_suffix_number: int


def last_number(text: str) -> int | None:
    """Return the digit that ends ``text``, or None if it does not end in one."""
    if not text:
        return None
    last = text[-1]
    if "0" <= last <= "9":
        return ord(last) - ord("0")
    return None


def suffix_number(text: str) -> int:
    """Digit value of the last byte of ``text``; non-digits fold to their byte modulo 10."""
    if not text:
        raise ValueError("name is empty")
    last = text.encode("utf-8")[-1]
    if ord("0") <= last <= ord("9"):
        return last - ord("0")
    return last % 10


def _node_events() -> list[ClusterEvent]:
    return [ClusterEvent(resource="Node", action_type="Add")]


class NodeNumber:
    """Scores nodes by comparing the last character of pod and node names.

    With ``reverse`` set, non-matching nodes are favoured instead.
    """

    def __init__(self, reverse: bool = False) -> None:
        self.reverse = reverse

    def name(self) -> str:
        return NAME

    def events_to_register(self) -> list[ClusterEvent]:
        return _node_events()

    def pre_score(self, state: CycleState, pod: Pod, nodes) -> Status | None:
        state.write(PRE_SCORE_STATE_KEY, _PreScoreState(suffix_number(pod.name)))
        return None

    def score(self, state: CycleState, pod: Pod, node_name: str) -> tuple[int, Status | None]:
        try:
            data = state.read(PRE_SCORE_STATE_KEY)
        except KeyError:
            return 0, None
        if not isinstance(data, _PreScoreState):
            return 0, Status(
                StatusCode.ERROR,
                f"fetched pre score state is not *preScoreState, but {type(data).__name__}, "
                "unexpected pre score state",
            )
        match_score, non_match_score = MATCH_SCORE, NON_MATCH_SCORE
        if self.reverse:
            match_score, non_match_score = non_match_score, match_score
        if data.pod_suffix_number == suffix_number(node_name):
            return match_score, None
        return non_match_score, None


def _decode_reverse(args: Any) -> bool:
    if args is None:
        return False
    if not isinstance(args, Mapping):
        raise ValueError(f"decode arg into NodeNumberArgs: unexpected type {type(args).__name__}")
    reverse = args.get("reverse", False)
    if reverse is None:
        return False
    if not isinstance(reverse, bool):
        raise ValueError("decode arg into NodeNumberArgs: reverse must be a boolean")
    return reverse


def new_node_number(args: Mapping[str, Any] | None) -> NodeNumber:
    """Build a NodeNumber plugin from optional arguments."""
    return NodeNumber(reverse=_decode_reverse(args))


class WasmNodeNumber:
    """Variant that reads the pod's spec node name and treats a missing digit as a match."""

    def __init__(self, reverse: bool = False) -> None:
        self.reverse = reverse

    def events_to_register(self) -> list[ClusterEvent]:
        return _node_events()

    def pre_score(self, state: CycleState, pod: Pod, nodes) -> Status | None:
        pod_number = last_number(pod.node_name)
        if pod_number is not None:
            state.write(PRE_SCORE_STATE_KEY, _PreScoreState(pod_number))
        return None

    def score(self, state: CycleState, pod: Pod, node_name: str) -> tuple[int, Status | None]:
        try:
            data = state.read(PRE_SCORE_STATE_KEY)
        except KeyError:
            match = True
        else:
            node_number = last_number(node_name)
            match = node_number is not None and data.pod_suffix_number == node_number
        if self.reverse:
            match = not match
        return (MATCH_SCORE if match else NON_MATCH_SCORE), None


def new_wasm_node_number(log, json_config: str | bytes | None) -> WasmNodeNumber:
    """Build a WasmNodeNumber from JSON configuration, logging when it is applied."""
    reverse = False
    if json_config is not None:
        try:
            decoded = json.loads(json_config)
        except (ValueError, TypeError) as exc:
            raise ValueError(f"decode arg into NodeNumberArgs: {exc}") from exc
        reverse = _decode_reverse(decoded)
        log.info("NodeNumberArgs is successfully applied")
    return WasmNodeNumber(reverse=reverse)