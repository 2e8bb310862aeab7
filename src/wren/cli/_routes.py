"""``wren routes`` — print the route table in match order."""

import argparse
import sys

from wren.cli._resolve import resolve_app


def _handler_name(handler: object) -> str:
    return getattr(handler, "__name__", repr(handler))


def run_routes(args: argparse.Namespace) -> None:
    """Print METHOD, PATH and handler for every entry, then the fallback."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    table = app.table
    rows: list[tuple[str, str, str]] = []
    for entry in table.entries:
        name = _handler_name(entry.handler)
        if entry.name and entry.name != name:
            name = f"{name} ({entry.name})"
        rows.append((entry.method, entry.path, name))
    rows.append(("*", "*", _handler_name(table.fallback)))

    width_method = max(6, *(len(r[0]) for r in rows))  # "METHOD" header
    width_path = max(4, *(len(r[1]) for r in rows))  # "PATH" header

    fmt = f"{{:<{width_method}}}  {{:<{width_path}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "HANDLER"))
    print("-" * min(width_method + width_path + 4 + max(len(r[2]) for r in rows), 80))
    for method, path, name in rows:
        print(fmt.format(method, path, name))
