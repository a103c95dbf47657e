"""Tests for the command-line interface."""

import io
from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import BASE_URL, SITES_PAYLOAD, FakeBackend, make_response
from uptimedash import build_parser, main


@pytest.fixture
def token_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "token"
    monkeypatch.setenv("UPTIMEDASH_BASE_URL", BASE_URL)
    monkeypatch.setenv("UPTIMEDASH_TOKEN_PATH", str(path))
    monkeypatch.delenv("UPTIMEDASH_TIMEOUT", raising=False)
    return path


@pytest.fixture
def backend():
    backend = FakeBackend()
    with patch("uptimedash.session.requests.Session", return_value=backend.http):
        yield backend


@pytest.fixture
def stored_session(token_path: Path, backend: FakeBackend) -> Path:
    """A persisted token the backend accepts, with the sample sites."""
    token_path.write_text("tok-9")
    backend.on("GET", "/api/verify-token", make_response(200, {"valid": True}))
    backend.on("GET", "/api/sites", make_response(200, SITES_PAYLOAD))
    return token_path


class TestParser:
    """Tests for argument parsing."""

    def test_delete_ids_are_integers(self) -> None:
        args = build_parser().parse_args(["delete", "3", "5"])
        assert args.ids == [3, 5]

    def test_no_command_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1
        assert "usage" in capsys.readouterr().out.lower()


class TestSessionCommands:
    """Tests for login, logout and session handling."""

    def test_login_stores_token(
        self, token_path: Path, backend: FakeBackend, capsys: pytest.CaptureFixture[str]
    ) -> None:
        backend.on("POST", "/api/login", make_response(200, {"token": "tok-new"}))
        backend.on("GET", "/api/sites", make_response(200, SITES_PAYLOAD))

        main(["login", "-u", "alice", "-p", "Secret123"])

        assert token_path.read_text() == "tok-new"
        assert "[success] Logged in successfully" in capsys.readouterr().out

    def test_login_rejected(self, token_path: Path, backend: FakeBackend, capsys: pytest.CaptureFixture[str]) -> None:
        backend.on("POST", "/api/login", make_response(401, {"error": "invalid credentials"}))

        with pytest.raises(SystemExit) as exc_info:
            main(["login", "-u", "alice", "-p", "wrong"])

        assert exc_info.value.code == 1
        assert not token_path.exists()
        assert "Invalid username or password" in capsys.readouterr().err

    def test_register_validates_locally(
        self, token_path: Path, backend: FakeBackend, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit):
            main(["register", "al", "alice@example.com", "-p", "Secret123"])

        assert backend.calls == []
        assert "username" in capsys.readouterr().err

    def test_logout_removes_token(self, stored_session: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["logout"])

        assert not stored_session.exists()
        assert "Logged out." in capsys.readouterr().out

    def test_commands_require_login(
        self, token_path: Path, backend: FakeBackend, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["list"])

        assert exc_info.value.code == 1
        assert "Not logged in" in capsys.readouterr().out
        assert backend.calls == []

    def test_bad_config_file(self, token_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["list", "-c", str(tmp_path / "missing.yaml")])

        assert exc_info.value.code == 1
        assert "Configuration file not found" in capsys.readouterr().out


class TestSiteCommands:
    """Tests for site listing and changes."""

    def test_list(self, stored_session: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["list"])

        out = capsys.readouterr().out
        assert "https://alpha.example" in out
        assert "https://echo.example" in out

    def test_list_down(self, stored_session: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["list", "--down"])

        out = capsys.readouterr().out
        assert "https://bravo.example" in out
        assert "https://charlie.example" in out
        assert "https://alpha.example" not in out

    def test_add_many_from_file(self, stored_session: Path, backend: FakeBackend, tmp_path: Path) -> None:
        url_file = tmp_path / "urls.txt"
        url_file.write_text("https://one.example\n# skip me\n\n  https://two.example  \n")
        backend.on("POST", "/api/sites/bulk", make_response(201, {"success": 2, "total": 2}))

        main(["add-many", "--file", str(url_file)])

        calls = backend.calls_to("POST", "/api/sites/bulk")
        assert calls[0].json == {"urls": ["https://one.example", "https://two.example"]}

    def test_delete_several_skips_unknown(
        self, stored_session: Path, backend: FakeBackend, capsys: pytest.CaptureFixture[str]
    ) -> None:
        backend.on("POST", "/api/sites/bulk-delete", make_response(200, {"success": 2, "total": 2}))

        main(["delete", "3", "99", "5"])

        assert backend.calls_to("POST", "/api/sites/bulk-delete")[0].json == {"site_ids": [3, 5]}
        captured = capsys.readouterr()
        assert "Unknown site id 99" in captured.out
        assert "Deleted 2 of 2 sites" in captured.out

    def test_delete_one(self, stored_session: Path, backend: FakeBackend) -> None:
        backend.on("DELETE", "/api/sites/4", make_response(200, {"message": "Site deleted"}))

        main(["delete", "4"])

        assert len(backend.calls_to("DELETE", "/api/sites/4")) == 1
        assert backend.calls_to("POST", "/api/sites/bulk-delete") == []

    def test_expired_token_exits(
        self, token_path: Path, backend: FakeBackend, capsys: pytest.CaptureFixture[str]
    ) -> None:
        token_path.write_text("tok-old")
        backend.on("GET", "/api/verify-token", make_response(401, {"error": "invalid token"}))

        with pytest.raises(SystemExit):
            main(["refresh"])

        assert not token_path.exists()
        assert "Not logged in" in capsys.readouterr().out


class TestShellCommand:
    """Tests for opening the interactive shell."""

    def test_shell_greets_restored_session(
        self, stored_session: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("quit\n"))

        main(["shell"])

        assert "[success] Welcome back!" in capsys.readouterr().out
        assert stored_session.read_text() == "tok-9"

    def test_shell_expiring_on_first_load(
        self, token_path: Path, backend: FakeBackend, capsys: pytest.CaptureFixture[str]
    ) -> None:
        token_path.write_text("tok-9")
        backend.on("GET", "/api/verify-token", make_response(200, {"valid": True}))
        backend.on("GET", "/api/sites", make_response(401, {"error": "invalid token"}))

        with pytest.raises(SystemExit) as exc_info:
            main(["shell"])

        captured = capsys.readouterr()
        assert exc_info.value.code == 1
        assert "Welcome back!" not in captured.out
        assert "Session expired, please log in again" in captured.err
        assert not token_path.exists()
