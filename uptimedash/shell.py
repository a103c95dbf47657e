"""Interactive dashboard shell with selection and range commands."""

import cmd
from typing import TextIO

from .app import Dashboard, View
from .models import FilterState, Site

_ON_VALUES = ("on", "yes", "true", "1")
_OFF_VALUES = ("off", "no", "false", "0")


def format_site_rows(sites: list[Site], selected: set[int] | None = None) -> list[str]:
    """Render sites as fixed-width text rows, optionally with checkboxes."""
    if not sites:
        return ["No sites added"]

    rows = []
    for site in sites:
        status = site.last_status.value if site.last_status else "UNKNOWN"
        checked = site.last_checked.strftime("%Y-%m-%d %H:%M:%S") if site.last_checked else "never"
        row = f"{site.id:>6}  {status:<8} {checked:<19}  {site.url}"
        if selected is not None:
            mark = "[x]" if site.id in selected else "[ ]"
            row = f"{mark} {row}"
        rows.append(row)
    return rows


def _parse_switch(arg: str) -> bool | None:
    value = arg.strip().lower()
    if value in _ON_VALUES:
        return True
    if value in _OFF_VALUES:
        return False
    return None


class DashboardShell(cmd.Cmd):
    """Line-oriented front end for a logged-in Dashboard."""

    intro = "UptimeDash shell. Type help or ? to list commands."
    prompt = "uptimedash> "

    def __init__(self, dashboard: Dashboard, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        super().__init__(stdin=stdin, stdout=stdout)
        if stdin is not None:
            self.use_rawinput = False
        self.dashboard = dashboard

    def _print(self, line: str = "") -> None:
        self.stdout.write(line + "\n")

    def _parse_id(self, arg: str) -> int | None:
        try:
            return int(arg.strip())
        except ValueError:
            self._print(f"Invalid site id: {arg.strip()!r}")
            return None

    def emptyline(self) -> bool:
        return False

    def postcmd(self, stop: bool, line: str) -> bool:
        if self.dashboard.view is View.LOGIN:
            self._print("Logged out.")
            return True
        return stop

    def do_list(self, arg: str) -> None:
        """list: show visible sites with their selection state."""
        dashboard = self.dashboard
        selected = set(dashboard.selection.selected)
        for row in format_site_rows(dashboard.visible_sites(), selected):
            self._print(row)

        header = dashboard.header_state()
        if header.indeterminate:
            state = "some"
        else:
            state = "all" if header.checked else "none"
        self._print(
            f"-- filter: {dashboard.store.filter.value}, "
            f"selected: {len(dashboard.selection)}, visible selected: {state}"
        )

    def do_reload(self, arg: str) -> None:
        """reload: refetch sites from the server."""
        self.dashboard.load_sites()

    def do_filter(self, arg: str) -> None:
        """filter all|down: choose which sites are visible."""
        value = arg.strip().lower()
        try:
            self.dashboard.set_filter(FilterState(value))
        except ValueError:
            self._print("Usage: filter all|down")

    def do_toggle(self, arg: str) -> None:
        """toggle ID: flip selection of one site and make it the range anchor."""
        site_id = self._parse_id(arg)
        if site_id is not None:
            self.dashboard.toggle(site_id)

    def do_shift(self, arg: str) -> None:
        """shift ID [on|off]: select or deselect every site from the anchor to ID."""
        parts = arg.split()
        if not parts or len(parts) > 2:
            self._print("Usage: shift ID [on|off]")
            return
        site_id = self._parse_id(parts[0])
        if site_id is None:
            return
        checked = None
        if len(parts) == 2:
            checked = _parse_switch(parts[1])
            if checked is None:
                self._print("Usage: shift ID [on|off]")
                return
        self.dashboard.toggle(site_id, shift=True, checked=checked)

    def do_all(self, arg: str) -> None:
        """all on|off: select or deselect every visible site."""
        checked = _parse_switch(arg)
        if checked is None:
            self._print("Usage: all on|off")
            return
        self.dashboard.select_all(checked)

    def do_selected(self, arg: str) -> None:
        """selected: print the selected site ids."""
        ids = self.dashboard.selection.selected
        self._print(" ".join(str(site_id) for site_id in ids) if ids else "Nothing selected")

    def do_delete_selected(self, arg: str) -> None:
        """delete_selected: delete every selected site."""
        if not len(self.dashboard.selection):
            self._print("Nothing selected")
            return
        self.dashboard.delete_selected()

    def do_delete(self, arg: str) -> None:
        """delete ID: delete one site."""
        site_id = self._parse_id(arg)
        if site_id is not None:
            self.dashboard.delete_site(site_id)

    def do_add(self, arg: str) -> None:
        """add URL: add one site."""
        self.dashboard.add_site(arg)

    def do_add_many(self, arg: str) -> None:
        """add_many URL [URL ...]: add up to 50 sites at once."""
        self.dashboard.add_sites(arg.split())

    def do_refresh(self, arg: str) -> None:
        """refresh: re-check every site on the server."""
        self.dashboard.refresh()

    def do_logout(self, arg: str) -> bool:
        """logout: end the session and leave the shell."""
        self.dashboard.logout()
        return True

    def do_quit(self, arg: str) -> bool:
        """quit: leave the shell, staying logged in."""
        return True

    def do_EOF(self, arg: str) -> bool:
        self._print()
        return True
