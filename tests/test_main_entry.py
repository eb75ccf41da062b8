import pytest

from shortbox import __main__ as entry


class TestParseArgs:
    def test_defaults(self):
        args = entry.parse_args([])
        assert args.host == "127.0.0.1"
        assert args.port == 8000
        assert not args.reload
        assert args.log_level == "INFO"
        assert args.workers == 1

    def test_rejects_unknown_log_level(self):
        with pytest.raises(SystemExit):
            entry.parse_args(["--log-level", "LOUD"])


class TestMain:
    def test_runs_app_with_uvicorn(self, monkeypatch):
        calls = []
        monkeypatch.setattr(entry.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

        assert entry.main(["--host", "0.0.0.0", "--port", "9000", "--log-level", "DEBUG"]) == 0

        app, kwargs = calls[0]
        assert app == "shortbox.main:app"
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9000
        assert kwargs["log_level"] == "debug"
        assert kwargs["workers"] is None

    def test_reload_with_workers_refused(self, monkeypatch):
        calls = []
        monkeypatch.setattr(entry.uvicorn, "run", lambda app, **kwargs: calls.append(app))
        assert entry.main(["--reload", "--workers", "2"]) == 2
        assert calls == []
