# wasmsched

A small, self-contained model of a cluster scheduling framework built
around score plugins, with an HTTP extender, helpers for performance
runs and a reader for scheduler configuration files.

## Modules

### `wasmsched.framework`

- `StatusCode`: `SUCCESS`, `ERROR`, `UNSCHEDULABLE`,
  `UNSCHEDULABLE_AND_UNRESOLVABLE`, `WAIT`, `SKIP`, `PENDING`.
- `Status(code, reason)` with `is_success()`. Wherever a status is
  expected, `None` means success.
- `StatusError`: raised when an extension point reports something other
  than success. The offending status is in its `status` attribute.
- `CycleState`: the per-cycle key/value store. It has `read(key)`, which
  raises `KeyError` if the key is absent, plus `write(key, value)` and
  `delete(key)`. It also supports `in`, iteration and `len`.
- `ClusterEvent(resource, action_type)`, `Node(name, labels)`,
  `Pod(name, namespace, uid, node_name)` and `NodeInfo(node)`.
- `require_success(status)`: raises `StatusError` unless the status is
  `None` or a success.
- `maybe_run_pre_filter(plugin, state, pod)`: calls the plugin's
  `events_to_register()`, then its `pre_filter` if it has one.
- `run_all(plugin, state, pod, node_info, pod_info)`: drives a plugin
  through every extension point it has, in scheduling order: pre-filter,
  filter, post-filter, add/remove pod, pre-score, score, normalize-score,
  reserve/unreserve, permit, pre-bind, bind, post-bind, then add/remove
  pod again. Extension points are found by method name. It returns the
  score, or 0 when there is no `score` method. A `None` state is replaced
  by a fresh `CycleState`.

### `wasmsched.nodenumber`

These plugins favour nodes whose name ends in the same digit as the pod.

- `last_number(text)`: the trailing digit of `text`, or `None` when it
  does not end in one.
- `suffix_number(text)`: the value of the last byte of `text`. A digit
  gives its value and any other byte gives itself modulo 10. An empty
  string raises `ValueError`.
- `NodeNumber(reverse=False)` works on the pod's name. `pre_score`
  stores the pod's suffix in the cycle state. `score` returns 10 on a
  match and 0 otherwise, or the reverse when `reverse` is set. It
  returns 0 when no pre-score state was stored. `name()` returns
  `"NodeNumber"`. `events_to_register()` asks for node additions.
  `new_node_number(args)` builds one from an optional mapping with a
  boolean `"reverse"`.
- `WasmNodeNumber(reverse=False)` works on the pod's `node_name`
  instead. `pre_score` stores a suffix only when there is a trailing
  digit. `score` treats a missing pre-score state as a match.
  `new_wasm_node_number(log, json_config)` decodes optional JSON
  configuration and calls `log.info("NodeNumberArgs is successfully
  applied")` when configuration is given. Bad configuration raises
  `ValueError`.

### `wasmsched.guest`

- `status_to_code(status)`: the integer code; `None` gives 0.
- `pack_score(score, code)` / `unpack_score(packed)` put a signed 32-bit
  score in the high half and an unsigned 32-bit status code in the low
  half of one 64-bit integer, and take them back out. Out-of-range
  values raise `ValueError`.
- `Host(current_node_name, node_score_list, normalized_score_list)`
  holds what the scheduler side supplies, and receives the normalized
  score list as compact JSON with sorted keys.
- `Guest(host, pod, state)` holds plugins registered with
  `set_score_plugin`, `set_reserve_plugin` and
  `set_score_extensions_plugin`. Registering `None` raises `ValueError`.
  - `score()` returns the packed score and code.
  - `reserve()` returns a status code.
  - `unreserve()` returns nothing.
  - `normalize_score()` passes the plugin a view whose `map()` returns
    the host's node scores. It writes the plugin's result to
    `host.normalized_score_list` and returns the status code.

  When the matching plugin is not registered, each of these returns 0
  or does nothing.

### `wasmsched.extender`

- `score_nodes(args)` takes extender arguments of the form
  `{"pod": {"metadata": {"name": ...}}, "nodes": {"items": [...]}}`.
  It returns `[{"host": name, "score": 10 or 0}, ...]` in node order,
  comparing `suffix_number` of each node name with that of the pod
  name.
- `NodeNumberExtender`:
  - `handle(body)` answers one request body with `(status, payload)`.
    Malformed input gives 500.
  - `serve(host="", port=8080)` runs a threaded HTTP server that accepts
    `POST /priorities`. A `GET` on that path gets 405 and any other path
    gets 404.
  - `wait_until_serving(timeout)` returns the bound address once the
    server is listening.
  - `shutdown()` stops the server and raises `RuntimeError` if it is not
    running.

### `wasmsched.perfdata`

- `DataItem(data, unit, labels)` and `DataItems(version="v1",
  data_items)`. Each has a `to_dict()` that gives the dashboard JSON
  shape.
- `get_scheduled_pods(pods, namespaces)` returns the pods with a
  `node_name`, limited to the given namespaces unless none are given.
- `ThroughputCollector(labels, namespaces, sample_interval=1.0)`:
  - `sample(scheduled)` records pods per second when `scheduled` is
    greater than zero.
  - `run(list_pods, stop_event, interval)` samples on a timer until the
    event is set.
  - `collect()` returns one `DataItem`. When samples exist it carries
    `Average`, `Perc50`, `Perc90`, `Perc95` and `Perc99` in `pods/s`,
    labelled `Metric=SchedulingThroughput`.
- `data_items_to_json_file(data_items, name_prefix, data_items_dir="")`
  writes indented JSON to `<prefix>_<local time>.json`, creating the
  directory if needed, and returns the path.

### `wasmsched.schedconfig`

- `load_config_from_file(path)` reads a YAML file. It raises
  `ValueError` unless the file has `apiVersion:
  kubescheduler.config.k8s.io/v1` and `kind: KubeSchedulerConfiguration`.
- `is_wasm_plugin_args(args)` decides whether plugin arguments decode as
  wasm plugin settings:
  - Missing arguments are accepted.
  - Arguments typed by the scheduler's own API group are not.
  - `guestURL` and `guestConfig` must be strings and `logSeverity` must
    be an integer.
- `get_wasm_plugin_names(config)` lists, profile by profile, the
  multi-point enabled plugins whose `pluginConfig` arguments pass that
  check.
- `get_wasm_plugins_from_config(argv=None)` reads `--config PATH` from
  the arguments and returns those names. Without `--config` it returns
  an empty list.

## Example

```python
from wasmsched.framework import CycleState, Node, NodeInfo, Pod, run_all
from wasmsched.nodenumber import new_node_number

plugin = new_node_number(None)
state = CycleState()
pod = Pod(name="happy8")
node_info = NodeInfo(node=Node(name="glad8"))

score = run_all(plugin, state, pod, node_info, None)
print(score)  # 10: both names end in 8
```

Finding the wasm plugins enabled in a scheduler configuration:

```python
from wasmsched.schedconfig import get_wasm_plugin_names, load_config_from_file

config = load_config_from_file("scheduler-config.yaml")
print(get_wasm_plugin_names(config))
```

## What this package does not do

- It does not load or execute WebAssembly modules. `Guest` dispatches
  to plugins written as ordinary objects.
- It is not a scheduler. It does not talk to a cluster API server,
  create nodes or pods, or bind anything.
- It installs no command-line program.
- It does not run benchmark workloads or gather latency histograms.
  `perfdata` only records and writes the numbers you give it.
- The configuration reader does not apply scheduler defaults or
  validate profiles beyond the checks listed above.