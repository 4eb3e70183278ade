"""Guest-side dispatch of score, reserve and normalize-score extension points."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .framework import CycleState, Pod, Status

_UINT32 = 0xFFFFFFFF
_UINT64 = 0xFFFFFFFFFFFFFFFF
_INT32_MIN = -(1 << 31)
_INT32_MAX = (1 << 31) - 1

MAX_NODE_SCORE = 100


def status_to_code(status: Status | None) -> int:
    """Numeric code of a status; None counts as success."""
    if status is None:
        return 0
    return int(status.code)


def pack_score(score: int, code: int) -> int:
    """Pack a signed 32-bit score and an unsigned 32-bit code into one 64-bit value."""
    if not _INT32_MIN <= score <= _INT32_MAX:
        raise ValueError(f"score {score} out of int32 range")
    if not 0 <= code <= _UINT32:
        raise ValueError(f"status code {code} out of uint32 range")
    return (((score & _UINT64) << 32) & _UINT64) | code


def unpack_score(packed: int) -> tuple[int, int]:
    """Split a packed value into (score, code)."""
    if not 0 <= packed <= _UINT64:
        raise ValueError(f"packed value {packed} out of uint64 range")
    high = packed >> 32
    score = high - (1 << 32) if high & 0x80000000 else high
    return score, packed & _UINT32


@dataclass
class Host:
    """What the scheduler side supplies to, and receives from, the guest."""

    current_node_name: str = ""
    node_score_list: dict[str, int] = field(default_factory=dict)
    normalized_score_list: str | None = None


class _NodeScore:
    """Lazy view of the host's node scores."""

    def __init__(self, host: Host) -> None:
        self._host = host

    def map(self) -> dict[str, int]:
        return dict(self._host.node_score_list)


@dataclass
class Guest:
    """Holds registered plugins and the per-cycle pod and state they see."""

    host: Host = field(default_factory=Host)
    pod: Pod | None = None
    state: CycleState = field(default_factory=CycleState)
    _score_plugin: Any = field(default=None, init=False, repr=False)
    _reserve_plugin: Any = field(default=None, init=False, repr=False)
    _score_extensions_plugin: Any = field(default=None, init=False, repr=False)

    def set_score_plugin(self, plugin: Any) -> None:
        if plugin is None:
            raise ValueError("nil scorePlugin")
        self._score_plugin = plugin

    def set_reserve_plugin(self, plugin: Any) -> None:
        if plugin is None:
            raise ValueError("nil reservePlugin")
        self._reserve_plugin = plugin

    def set_score_extensions_plugin(self, plugin: Any) -> None:
        if plugin is None:
            raise ValueError("nil scoreExtensions")
        self._score_extensions_plugin = plugin

    def score(self) -> int:
        """Run the score plugin and return the packed score and status code."""
        if self._score_plugin is None:
            return 0
        score, status = self._score_plugin.score(self.state, self.pod, self.host.current_node_name)
        return pack_score(score, status_to_code(status))

    def reserve(self) -> int:
        if self._reserve_plugin is None:
            return 0
        status = self._reserve_plugin.reserve(self.state, self.pod, self.host.current_node_name)
        return status_to_code(status)

    def unreserve(self) -> None:
        if self._reserve_plugin is None:
            return
        self._reserve_plugin.unreserve(self.state, self.pod, self.host.current_node_name)

    def normalize_score(self) -> int:
        """Run normalization, hand the JSON result to the host and return the status code."""
        if self._score_extensions_plugin is None:
            return 0
        updated, status = self._score_extensions_plugin.normalize_score(
            self.state, self.pod, _NodeScore(self.host)
        )
        self.host.normalized_score_list = json.dumps(
            updated, sort_keys=True, separators=(",", ":")
        )
        return status_to_code(status)