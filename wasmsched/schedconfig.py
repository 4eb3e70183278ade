"""Find the wasm plugins a scheduler configuration enables."""

from __future__ import annotations

import argparse
import json
from collections.abc import Mapping, Sequence
from typing import Any

import yaml

SCHEDULER_API_GROUP = "kubescheduler.config.k8s.io"
CONFIG_API_VERSION = SCHEDULER_API_GROUP + "/v1"
CONFIG_KIND = "KubeSchedulerConfiguration"

_WASM_FIELD_TYPES: dict[str, type] = {
    "guestURL": str,
    "guestConfig": str,
    "logSeverity": int,
}


def is_wasm_plugin_args(args: Any) -> bool:
    """Whether plugin arguments decode as a wasm plugin configuration.

    Missing arguments decode trivially. Arguments typed by the scheduler's
    own API group belong to built-in plugins and do not.
    """
    if args is None:
        return True
    if isinstance(args, (bytes, bytearray, str)):
        try:
            args = json.loads(args)
        except ValueError:
            return False
    if not isinstance(args, Mapping):
        return False
    api_version = args.get("apiVersion")
    if isinstance(api_version, str) and api_version.split("/")[0] == SCHEDULER_API_GROUP:
        return False
    for key, expected in _WASM_FIELD_TYPES.items():
        value = args.get(key)
        if value is None:
            continue
        if expected is int:
            if not isinstance(value, int) or isinstance(value, bool):
                return False
        elif not isinstance(value, expected):
            return False
    return True


def get_wasm_plugin_names(config: Mapping[str, Any]) -> list[str]:
    """Names of wasm plugins enabled as multi-point plugins, in profile order."""
    names: list[str] = []
    for profile in config.get("profiles") or []:
        wasm_plugins = {
            entry.get("name")
            for entry in profile.get("pluginConfig") or []
            if is_wasm_plugin_args(entry.get("args"))
        }
        plugins = profile.get("plugins") or {}
        multi_point = plugins.get("multiPoint") or {}
        names.extend(
            plugin["name"]
            for plugin in multi_point.get("enabled") or []
            if plugin.get("name") in wasm_plugins
        )
    return names


def load_config_from_file(path: str) -> dict[str, Any]:
    """Read a scheduler configuration file; raise ValueError if it is not one."""
    with open(path, encoding="utf-8") as handle:
        obj = yaml.safe_load(handle)
    if not isinstance(obj, Mapping):
        raise ValueError(f"unexpected object type: {type(obj).__name__}")
    api_version = obj.get("apiVersion")
    kind = obj.get("kind")
    if api_version != CONFIG_API_VERSION or kind != CONFIG_KIND:
        raise ValueError(f"unexpected object type: {api_version}, Kind={kind}")
    return dict(obj)


def get_wasm_plugins_from_config(argv: Sequence[str] | None = None) -> list[str]:
    """Load the file named by ``--config`` and return its enabled wasm plugins."""
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config", default="")
    options, _ = parser.parse_known_args(argv)
    if not options.config:
        return []
    return get_wasm_plugin_names(load_config_from_file(options.config))