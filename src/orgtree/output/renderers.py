"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`;
unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from orgtree.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from orgtree.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render *result* to a string via Rich (plain text off a terminal)."""
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if result.op == "tree_structure":
        leaves = _leaf_ids(result.data.get("root", {}))
        return "\n".join(leaves) if leaves else f"OK: {result.op}"

    if result.op == "position_fields":
        entries = result.data.get("custom_fields", [])
        return "\n".join(f"{e['key']}={e['value_text']}" for e in entries) or f"OK: {result.op}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if isinstance(item, dict))

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _leaf_ids(node: dict[str, Any]) -> list[str]:
    if node.get("type") == "position":
        return [str(node.get("positionId"))]
    ids: list[str] = []
    for child in node.get("children", []):
        ids.extend(_leaf_ids(child))
    return ids


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="org.ok"), Text(f"  {result.op}", style="org.op"))


def _field(console: Console, key: str, value: Any) -> None:
    line = Text(f"  {key}: ", style="org.key")
    line.append(str(value), style="org.id" if key == "id" or key.endswith("_id") else "")
    console.print(line)


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        if key == "telemetry":
            _render_span(console, value, indent=4)
        else:
            console.print(f"    {key}: {value}")


def _render_span(console: Console, span: dict[str, Any], indent: int = 4) -> None:
    """Render a span and its children with color-coded timing."""
    duration = span.get("duration_ms", 0.0)
    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{' ' * indent}[{style}]{duration:>8.2f}ms[/{style}]  {span.get('name', '?')}"
    annotations = span.get("annotations")
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)
    for child in span.get("children", []):
        _render_span(console, child, indent=indent + 4)


def _group_label(node: dict[str, Any]) -> Text:
    count = sum(1 for _ in _leaf_ids(node))
    if node.get("customFieldKey") is None:
        text = Text(str(node.get("label")), style="org.bucket")
    else:
        text = Text(str(node.get("label")), style="org.group")
        text.append(f"  [{node['customFieldKey']}]", style="org.key")
    text.append(f"  ({count})", style="dim")
    return text


def _leaf_label(node: dict[str, Any]) -> Text:
    text = Text(f"#{node.get('positionId')} ", style="org.id")
    text.append(str(node.get("positionName") or ""), style="org.position")
    if node.get("employeeFullName"):
        text.append(f"  {node['employeeFullName']}", style="org.employee")
    return text


def _add_children(branch: Tree, node: dict[str, Any]) -> None:
    for child in node.get("children", []):
        if child.get("type") == "position":
            branch.add(_leaf_label(child))
        else:
            _add_children(branch.add(_group_label(child)), child)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="org.error"),
        Text(f"  {result.op}", style="org.op"),
        Text(" — "),
        msg,
    )
    if err and err.detail:
        errors = err.detail.get("errors")
        if errors:
            for item in errors:
                console.print(f"    {item.get('loc') or '<root>'}: {item.get('msg')}")
        elif verbose:
            console.print(Text("  detail:", style="dim"))
            for key, value in err.detail.items():
                console.print(f"    {key}: {value}")


# ── Op renderers ──────────────────────────────────────────────────────


def _render_tree_structure(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    header = Text(str(d.get("name")), style="org.title")
    header.append(f"  ({d.get('tree_id')})", style="org.key")
    tree = Tree(header)
    _add_children(tree, d.get("root", {}))
    console.print(tree)
    levels = ", ".join(f"{lv['order']}:{lv['field_key']}" for lv in d.get("levels", []))
    _field(console, "levels", levels or "-")
    _field(console, "positions", d.get("position_count", 0))
    if verbose:
        for diag in d.get("diagnostics", []):
            console.print(f"  [org.warning]{diag['code']}[/org.warning] {diag['message']}")
        _render_meta(console, result)


def _render_list_trees(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if not items:
        _status_line(console, result)
        _field(console, "count", 0)
        return
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("ID", style="org.id", no_wrap=True)
    table.add_column("Name", style="org.title")
    table.add_column("Default", justify="center")
    table.add_column("Levels")
    if verbose:
        table.add_column("Description", style="dim")
    for item in items:
        row = [
            str(item["id"]),
            str(item["name"]),
            "*" if item.get("is_default") else "",
            " > ".join(lv["field_key"] for lv in item.get("levels", [])),
        ]
        if verbose:
            row.append(item.get("description") or "")
        table.add_row(*row)
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_position_fields(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    title = Text(f"#{d.get('id')} ", style="org.id")
    title.append(str(d.get("name")), style="org.title")
    if d.get("employee_full_name"):
        title.append(f"  {d['employee_full_name']}", style="org.employee")
    console.print(title)

    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Key", style="org.key")
    table.add_column("Label")
    table.add_column("Value", style="org.title")
    table.add_column("Linked", style="org.linked")
    for entry in d.get("custom_fields", []):
        linked = "; ".join(
            f"{lf['label']}: " + ", ".join(v["text"] for v in lf["values"])
            for lf in entry.get("linked_fields", [])
        )
        table.add_row(entry["key"], entry["label"], entry["value_text"], linked)
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_import(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("fields", "values", "positions", "trees", "replaced"):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Any] = {
    "tree_structure": _render_tree_structure,
    "list_trees": _render_list_trees,
    "position_fields": _render_position_fields,
    "import_snapshot": _render_import,
}
