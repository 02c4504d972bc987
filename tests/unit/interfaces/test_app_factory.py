"""Tests for create_app wiring and the CLI argument mapping."""

from __future__ import annotations

from fastapi.testclient import TestClient

from flixarr.infrastructure.config.schema import AppConfig
from flixarr.interfaces.app import create_app
from flixarr.interfaces.cli.cli import _parse_args, build_cli_overrides


class TestCreateApp:
    def test_title_from_app_name(self) -> None:
        app = create_app(AppConfig(app_name="flixarr-staging"))
        assert app.title == "flixarr-staging"

    def test_healthz_without_lifespan(self) -> None:
        client = TestClient(create_app(AppConfig()))
        resp = client.get("/api/v1/healthz")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "decoder_available": False}

    def test_cors_allows_any_origin(self) -> None:
        client = TestClient(create_app(AppConfig()))
        resp = client.get(
            "/api/v1/healthz", headers={"Origin": "https://player.example"}
        )
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_rate_limit_from_config(self) -> None:
        config = AppConfig.model_validate({"api": {"rate_limit_requests": 2}})
        client = TestClient(create_app(config))
        assert client.get("/api/v1/healthz").status_code == 200
        assert client.get("/api/v1/healthz").status_code == 200
        assert client.get("/api/v1/healthz").status_code == 429

    def test_rate_limit_disabled(self) -> None:
        config = AppConfig.model_validate({"api": {"rate_limit_requests": 0}})
        client = TestClient(create_app(config))
        resp = client.get("/api/v1/healthz")
        assert "X-RateLimit-Limit" not in resp.headers


class TestCliOverrides:
    def test_only_set_flags(self) -> None:
        args = _parse_args(["--log-level", "DEBUG", "--decoder-script", "/opt/r.js"])
        assert build_cli_overrides(args) == {
            "log_level": "DEBUG",
            "decoder_script_path": "/opt/r.js",
        }

    def test_no_flags(self) -> None:
        assert build_cli_overrides(_parse_args([])) == {}
