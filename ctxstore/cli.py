"""
ctxstore CLI: Inspect and edit the persisted contexts.

Provides commands for:
- context: add, list, get, use, delete and show current contexts
- server: list servers and show the current server (legacy view)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from ctxstore.errors import ContextStoreError, NoCurrentContextError
from ctxstore.schema import dump_context, dump_server
from ctxstore.settings import StoreSettings
from ctxstore.store import ContextStore
from ctxstore.types import ClusterServer, Context, ContextType, GlobalServer

console = Console()
err_console = Console(stderr=True)

_TYPE_CHOICES = [t.value for t in ContextType]


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="ctxstore",
        description="ctxstore: Manage cluster connection contexts",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--config-dir",
        help="Config directory (default: $CTXSTORE_CONFIG_DIR or ~/.config/ctxstore)",
    )
    parser.add_argument(
        "--lock-timeout",
        type=float,
        help="Seconds to wait for the config lock (default: wait forever)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Context commands
    context_parser = subparsers.add_parser("context", help="Manage contexts")
    context_subparsers = context_parser.add_subparsers(
        dest="context_command",
        help="Context commands",
    )

    # context add
    add_parser = context_subparsers.add_parser("add", help="Add a context")
    add_parser.add_argument("name", help="Context name")
    add_parser.add_argument(
        "--type", "-t",
        choices=_TYPE_CHOICES,
        default=ContextType.K8S.value,
        help="Context type (default: k8s)",
    )
    add_parser.add_argument("--endpoint", "-e", default="", help="Endpoint")
    add_parser.add_argument("--kubeconfig", default="", help="Kubeconfig path (k8s only)")
    add_parser.add_argument("--kube-context", default="", help="Kubeconfig context (k8s only)")
    add_parser.add_argument(
        "--management-cluster",
        action="store_true",
        help="Mark as a management cluster (k8s only)",
    )
    add_parser.add_argument(
        "--current",
        action="store_true",
        help="Make the new context current for its type",
    )

    # context list
    list_parser = context_subparsers.add_parser("list", help="List contexts")
    list_parser.add_argument("--type", "-t", choices=_TYPE_CHOICES, help="Filter by type")
    list_parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output as JSON",
    )

    # context get
    get_parser = context_subparsers.add_parser("get", help="Show a context")
    get_parser.add_argument("name", help="Context name")

    # context use
    use_parser = context_subparsers.add_parser("use", help="Make a context current")
    use_parser.add_argument("name", help="Context name")

    # context delete
    delete_parser = context_subparsers.add_parser("delete", help="Delete a context")
    delete_parser.add_argument("name", help="Context name")

    # context current
    current_parser = context_subparsers.add_parser(
        "current",
        help="Show the current context for a type",
    )
    current_parser.add_argument(
        "--type", "-t",
        choices=_TYPE_CHOICES,
        default=ContextType.K8S.value,
        help="Context type (default: k8s)",
    )

    # Server commands
    server_parser = subparsers.add_parser("server", help="Legacy server view")
    server_subparsers = server_parser.add_subparsers(
        dest="server_command",
        help="Server commands",
    )
    server_subparsers.add_parser("list", help="List servers")
    server_subparsers.add_parser("current", help="Show the current server")

    args = parser.parse_args(argv)

    # Setup logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    overrides = {}
    if args.lock_timeout is not None:
        overrides["lock_timeout"] = args.lock_timeout
    if args.config_dir:
        settings = StoreSettings(config_dir=args.config_dir, **overrides)
    else:
        settings = StoreSettings.from_env(**overrides)
    store = settings.connect()

    try:
        if args.command == "context":
            return handle_context(store, args)
        return handle_server(store, args)
    except ContextStoreError as e:
        err_console.print(f"[red]Error:[/red] {e}", markup=True, highlight=False)
        return 1


def handle_context(store: ContextStore, args: argparse.Namespace) -> int:
    """Handle context subcommands."""
    if args.context_command == "add":
        ctx = _build_context(args)
        store.add_context(ctx, make_current=args.current)
        console.print(f"Added context {ctx.name}")
        return 0

    elif args.context_command == "list":
        contexts = store.list_contexts(args.type)
        current = store.get_all_current_contexts()
        if args.json_output:
            print(json.dumps([dump_context(c) for c in contexts], indent=2))
            return 0
        if not contexts:
            console.print("[yellow]No contexts.[/yellow]")
            return 0

        table = Table(title="Contexts", show_header=True, header_style="bold")
        table.add_column("Name", style="cyan")
        table.add_column("Type")
        table.add_column("Endpoint")
        table.add_column("Current", justify="center")
        for ctx in contexts:
            is_current = current.get(ctx.type) == ctx.name
            table.add_row(
                ctx.name,
                ctx.type.value,
                ctx.endpoint,
                "[green]*[/green]" if is_current else "",
            )
        console.print(table)
        return 0

    elif args.context_command == "get":
        ctx = store.get_context(args.name)
        print(json.dumps(dump_context(ctx), indent=2))
        return 0

    elif args.context_command == "use":
        ctx = store.set_current_context(args.name)
        console.print(f"Current {ctx.type.value} context is now {ctx.name}")
        return 0

    elif args.context_command == "delete":
        store.remove_context(args.name)
        console.print(f"Deleted context {args.name}")
        return 0

    elif args.context_command == "current":
        ctx = store.get_current_context(args.type)
        print(ctx.name)
        return 0

    else:
        print("Usage: ctxstore context {add|list|get|use|delete|current}", file=sys.stderr)
        return 1


def handle_server(store: ContextStore, args: argparse.Namespace) -> int:
    """Handle server subcommands."""
    if args.server_command == "list":
        servers = store.list_servers()
        if not servers:
            console.print("[yellow]No servers.[/yellow]")
            return 0

        try:
            current_name = store.get_current_server().name
        except NoCurrentContextError:
            current_name = None

        table = Table(title="Servers", show_header=True, header_style="bold")
        table.add_column("Name", style="cyan")
        table.add_column("Type")
        table.add_column("Current", justify="center")
        for server in servers:
            table.add_row(
                server.name,
                server.type.value,
                "[green]*[/green]" if server.name == current_name else "",
            )
        console.print(table)
        return 0

    elif args.server_command == "current":
        server = store.get_current_server()
        print(json.dumps(dump_server(server), indent=2))
        return 0

    else:
        print("Usage: ctxstore server {list|current}", file=sys.stderr)
        return 1


def _build_context(args: argparse.Namespace) -> Context:
    ctx_type = ContextType(args.type)
    if ctx_type == ContextType.K8S:
        return Context(
            name=args.name,
            type=ctx_type,
            cluster_opts=ClusterServer(
                endpoint=args.endpoint,
                path=args.kubeconfig,
                context=args.kube_context,
                is_management_cluster=args.management_cluster,
            ),
        )
    return Context(
        name=args.name,
        type=ctx_type,
        global_opts=GlobalServer(endpoint=args.endpoint),
    )


if __name__ == "__main__":
    sys.exit(main())
