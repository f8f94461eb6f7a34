"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer. Amounts arrive
as decimal strings and are rounded to cents here, at the presentation
boundary.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from quotectl.domain.money import format_number, round_money
from quotectl.output.console import create_console, get_output, style_for_status, style_for_type

if TYPE_CHECKING:
    from rich.console import Console

    from quotectl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False, currency: str = "") -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose, currency=currency)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: ids, one per line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    ids = result.data.get("item_ids")
    if ids is None and result.op == "list_quotes":
        ids = [item.get("id") for item in result.data.get("items", [])]
    if ids is None and "id" in result.data:
        ids = [result.data["id"]]
    if ids:
        return "\n".join(str(i) for i in ids if i)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def money(value: Any) -> str:
    """Cents with a thousands separator: ``"1234.5"`` -> ``"1,234.50"``."""
    return f"{round_money(Decimal(str(value))):,.2f}"


def _money_text(value: Any, currency: str = "") -> Text:
    text = money(value) + (f" {currency}" if currency else "")
    return Text(text, style="qt.negative" if Decimal(str(value)) < 0 else "")


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="qt.ok"), Text(f"  {result.op}", style="qt.op"))


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="qt.key")
    style = "qt.id" if key == "id" or key.endswith("_id") else ""
    console.print(k, Text(str(value), style=style))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    duration = span_data.get("duration_ms", 0.0)
    style = "bold red" if duration > 1000 else "yellow" if duration > 100 else "dim"
    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {span_data.get('name', '?')}"
    if span_data.get("annotations"):
        line += "  (" + ", ".join(f"{k}={v}" for k, v in span_data["annotations"].items()) + ")"
    console.print(line)
    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _outline_numbers(items: list[dict[str, Any]]) -> dict[str, str]:
    """Outline labels (``1``, ``1.2``, ``1.2.1``) from parent chains and positions."""
    numbers: dict[str, str] = {}
    for item in items:
        parent = item.get("parent_id")
        prefix = f"{numbers[parent]}." if parent in numbers else ""
        numbers[item["id"]] = f"{prefix}{item['position']}"
    return numbers


def item_table(data: dict[str, Any], *, verbose: bool = False) -> Table:
    """Build the indented item tree table for a quote view payload.

    VAT and discount columns appear only when some priced item needs them.
    """
    columns = data.get("columns", {})
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("#", no_wrap=True)
    table.add_column("Designation")
    if verbose:
        table.add_column("ID", style="qt.id", no_wrap=True)
    table.add_column("Qty", justify="right")
    table.add_column("Unit")
    table.add_column("Unit price", justify="right")
    if columns.get("discount"):
        table.add_column("Disc. %", justify="right")
    if columns.get("vat"):
        table.add_column("VAT %", justify="right")
    table.add_column("Total HT", justify="right", style="qt.money")

    items: list[dict[str, Any]] = data.get("items", [])
    numbers = _outline_numbers(items)
    for item in items:
        item_type = item.get("type", "")
        structural = item_type in {"chapter", "section"}
        label = Text("  " * int(item.get("depth", 0)) + str(item.get("designation", "")))
        label.stylize(style_for_type(item_type))

        row: list[Any] = [numbers.get(item["id"], ""), label]
        if verbose:
            row.append(item["id"])
        if structural:
            row += ["", "", ""]
        else:
            row += [
                format_number(Decimal(item["quantity"])),
                item.get("unit", ""),
                money(item["unit_price"]),
            ]
        if columns.get("discount"):
            pct = Decimal(item.get("discount_percentage", "0"))
            row.append(format_number(pct) if pct and not structural else "")
        if columns.get("vat"):
            row.append("" if structural else format_number(Decimal(item["vat_rate"])))
        row.append(_money_text(item["total_ht"]))
        table.add_row(*row)
    return table


def _totals_table(data: dict[str, Any], currency: str) -> Table:
    totals = data.get("totals", {})
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column(justify="right", style="qt.key")
    table.add_column(justify="right", style="qt.money")
    table.add_row("Total HT", _money_text(totals.get("total_ht", "0"), currency))
    table.add_row("VAT", _money_text(totals.get("total_vat", "0"), currency))
    table.add_row("Total TTC", _money_text(totals.get("total_ttc", "0"), currency))
    return table


def _vat_table(data: dict[str, Any]) -> Table:
    table = Table(title="VAT breakdown", show_header=True, pad_edge=False)
    table.add_column("Rate", justify="right")
    table.add_column("Base HT", justify="right")
    table.add_column("VAT", justify="right")
    for line in data.get("vat_breakdown", []):
        table.add_row(
            f"{format_number(Decimal(line['rate']))}%",
            money(line["base_ht"]),
            money(line["vat_amount"]),
        )
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="qt.error"), Text(f"  {result.op}", style="qt.op"), Text(" — "), msg
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Quote renderers ───────────────────────────────────────────────────


def _render_quote(
    result: ServiceResult, console: Console, *, verbose: bool = False, currency: str = ""
) -> None:
    """Header panel, item tree, totals and VAT breakdown."""
    d = result.data
    quote = d.get("quote", {})
    _status_line(console, result)

    header = Text()
    header.append(f"{quote.get('number') or quote.get('quote_id') or '(unsaved)'}", style="qt.id")
    status = str(quote.get("status", ""))
    header.append("  ")
    header.append(status, style=style_for_status(status))
    for key, label in (("client_name", "Client"), ("project_name", "Project")):
        if quote.get(key):
            header.append(f"\n{label}: {quote[key]}")
    header.append(f"\nIssued {quote.get('issue_date', '')}, valid until {quote.get('expiry_date', '')}")
    console.print(Panel(header, expand=False))

    if d.get("items"):
        console.print(item_table(d, verbose=verbose))
        if d.get("vat_breakdown"):
            console.print(_vat_table(d))
    else:
        console.print(Text("  (no items)", style="dim"))
    console.print(_totals_table(d, currency))

    if verbose:
        for key in ("revision", "id_map"):
            if d.get(key):
                _field(console, key, d[key])
        _render_meta(console, result)


def _render_quote_list(
    result: ServiceResult, console: Console, *, verbose: bool = False, currency: str = ""
) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(Text("No quotes found.", style="dim"))
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="qt.id", no_wrap=True)
    table.add_column("Number")
    table.add_column("Status")
    table.add_column("Client")
    table.add_column("Project")
    table.add_column("Issued")
    table.add_column("Total TTC", justify="right", style="qt.money")
    for item in items:
        status = str(item.get("status", ""))
        table.add_row(
            str(item.get("id", "")),
            str(item.get("number", "")),
            Text(status, style=style_for_status(status)),
            str(item.get("client_name", "")),
            str(item.get("project_name", "")),
            str(item.get("issue_date", "")),
            money(item.get("total_ttc", "0")),
        )
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_generic(
    result: ServiceResult, console: Console, *, verbose: bool = False, currency: str = ""
) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Any] = {
    "create_quote": _render_quote,
    "show_quote": _render_quote,
    "apply": _render_quote,
    "add_item": _render_quote,
    "update_item": _render_quote,
    "remove_item": _render_quote,
    "move_item": _render_quote,
    "apply_discount": _render_quote,
    "add_from_catalog": _render_quote,
    "update_quote_info": _render_quote,
    "list_quotes": _render_quote_list,
}
