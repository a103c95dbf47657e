"""UptimeDash - command-line client for a site uptime monitoring dashboard."""

import argparse
import getpass
import logging
import sys

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application.

    User-facing messages go through the notifier, so only warnings are logged
    unless verbose output is requested.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _open_dashboard(args: argparse.Namespace):
    """Load configuration and build a Dashboard printing to the console."""
    from .app import Dashboard
    from .config import ConfigError, load_config
    from .notify import ConsoleNotifier

    _setup_logging(args.verbose)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)

    logger.debug("Using backend %s", config.server.base_url)
    return Dashboard(config, ConsoleNotifier())


def _require_session(args: argparse.Namespace):
    """Open a dashboard with a restored session and loaded sites, or exit."""
    dashboard = _open_dashboard(args)
    if not dashboard.resume():
        print("Error: Not logged in. Run 'uptimedash login' first.")
        sys.exit(1)
    if not dashboard.load_sites():
        sys.exit(1)
    return dashboard


def _cmd_login(args: argparse.Namespace) -> None:
    """Execute the login command."""
    dashboard = _open_dashboard(args)
    username = args.username or input("Username: ")
    password = args.password or getpass.getpass("Password: ")

    if not dashboard.login(username, password):
        sys.exit(1)


def _cmd_register(args: argparse.Namespace) -> None:
    """Execute the register command."""
    dashboard = _open_dashboard(args)
    password = args.password or getpass.getpass("Password: ")

    if not dashboard.register(args.username, args.email, password):
        sys.exit(1)


def _cmd_logout(args: argparse.Namespace) -> None:
    """Execute the logout command - forget the stored token."""
    dashboard = _open_dashboard(args)
    dashboard.logout()
    print("Logged out.")


def _cmd_list(args: argparse.Namespace) -> None:
    """Execute the list command - print sites with their last status."""
    from .models import FilterState
    from .shell import format_site_rows

    dashboard = _require_session(args)
    if args.down:
        dashboard.set_filter(FilterState.DOWN_ONLY)

    for row in format_site_rows(dashboard.visible_sites()):
        print(row)


def _cmd_add(args: argparse.Namespace) -> None:
    """Execute the add command - add a single site."""
    dashboard = _require_session(args)
    if not dashboard.add_site(args.url):
        sys.exit(1)


def _cmd_add_many(args: argparse.Namespace) -> None:
    """Execute the add-many command - add URLs from a file or stdin."""
    from .validation import parse_url_list

    if args.file:
        try:
            with open(args.file, encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            print(f"Error: Cannot read {args.file}: {e}")
            sys.exit(1)
    else:
        text = sys.stdin.read()

    dashboard = _require_session(args)
    if dashboard.add_sites(parse_url_list(text)) is None:
        sys.exit(1)


def _cmd_delete(args: argparse.Namespace) -> None:
    """Execute the delete command - delete one site, or several in bulk."""
    dashboard = _require_session(args)

    if len(args.ids) == 1:
        if not dashboard.delete_site(args.ids[0]):
            sys.exit(1)
        return

    known = dashboard.store.all_ids()
    for site_id in dict.fromkeys(args.ids):
        if site_id not in known:
            print(f"Warning: Unknown site id {site_id}, skipping")
            continue
        dashboard.toggle(site_id)

    if dashboard.delete_selected() is None:
        sys.exit(1)


def _cmd_refresh(args: argparse.Namespace) -> None:
    """Execute the refresh command - re-check all sites."""
    from .shell import format_site_rows

    dashboard = _require_session(args)
    if dashboard.refresh() is None:
        sys.exit(1)

    for row in format_site_rows(dashboard.visible_sites()):
        print(row)


def _cmd_link_telegram(args: argparse.Namespace) -> None:
    """Execute the link-telegram command - request a bot link code."""
    dashboard = _require_session(args)
    if dashboard.link_telegram() is None:
        sys.exit(1)


def _cmd_shell(args: argparse.Namespace) -> None:
    """Execute the shell command - interactive selection and bulk actions."""
    from .shell import DashboardShell

    dashboard = _open_dashboard(args)
    if not dashboard.start():
        print("Error: Not logged in. Run 'uptimedash login' first.")
        sys.exit(1)
    try:
        DashboardShell(dashboard).cmdloop()
    except KeyboardInterrupt:
        print()


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to configuration file (default: built-in defaults)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        description="UptimeDash - client for a site uptime monitoring dashboard"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"uptimedash {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    login_parser = subparsers.add_parser("login", help="Log in and store the session token")
    login_parser.add_argument("-u", "--username", help="Username (prompted if omitted)")
    login_parser.add_argument("-p", "--password", help="Password (prompted if omitted)")
    _add_common_arguments(login_parser)
    login_parser.set_defaults(func=_cmd_login)

    register_parser = subparsers.add_parser("register", help="Create an account")
    register_parser.add_argument("username", help="Username (at least 3 characters)")
    register_parser.add_argument("email", help="Email address")
    register_parser.add_argument("-p", "--password", help="Password (prompted if omitted)")
    _add_common_arguments(register_parser)
    register_parser.set_defaults(func=_cmd_register)

    logout_parser = subparsers.add_parser("logout", help="Forget the stored session token")
    _add_common_arguments(logout_parser)
    logout_parser.set_defaults(func=_cmd_logout)

    list_parser = subparsers.add_parser("list", help="List monitored sites")
    list_parser.add_argument("--down", action="store_true", help="Show only sites that are down")
    _add_common_arguments(list_parser)
    list_parser.set_defaults(func=_cmd_list)

    add_parser = subparsers.add_parser("add", help="Add a site to monitor")
    add_parser.add_argument("url", help="URL to monitor")
    _add_common_arguments(add_parser)
    add_parser.set_defaults(func=_cmd_add)

    add_many_parser = subparsers.add_parser(
        "add-many",
        help="Add up to 50 sites, one URL per line",
    )
    add_many_parser.add_argument("-f", "--file", help="File with URLs (default: read stdin)")
    _add_common_arguments(add_many_parser)
    add_many_parser.set_defaults(func=_cmd_add_many)

    delete_parser = subparsers.add_parser("delete", help="Delete one or more sites by id")
    delete_parser.add_argument("ids", nargs="+", type=int, help="Site ids")
    _add_common_arguments(delete_parser)
    delete_parser.set_defaults(func=_cmd_delete)

    refresh_parser = subparsers.add_parser("refresh", help="Re-check all sites now")
    _add_common_arguments(refresh_parser)
    refresh_parser.set_defaults(func=_cmd_refresh)

    link_parser = subparsers.add_parser("link-telegram", help="Get a code to link Telegram alerts")
    _add_common_arguments(link_parser)
    link_parser.set_defaults(func=_cmd_link_telegram)

    shell_parser = subparsers.add_parser("shell", help="Interactive dashboard with multi-select")
    _add_common_arguments(shell_parser)
    shell_parser.set_defaults(func=_cmd_shell)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the uptimedash package."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    args.func(args)
