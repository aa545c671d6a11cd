"""Tests for the fetch and sources commands."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import patch

import httpx
import pytest
from typer.testing import CliRunner

from multisource.cli import ExitCode
from multisource.cli import app
from multisource.cli.commands.fetch import SourceSelectionError
from multisource.cli.commands.fetch import build_sources
from multisource.cli.commands.fetch import exit_code_for
from multisource.cli.commands.fetch import url_source_id
from multisource.config.settings import Config
from multisource.config.settings import convert_config
from multisource.config.settings import save_config
from multisource.core import http as http_module
from multisource.models import AggregationResult
from multisource.models import SourceOutcome

runner = CliRunner()


@pytest.fixture
def responses(temp_config_dir):
    """Serve canned responses by host through the shared HTTP client.

    Hosts without a route answer 404.
    """
    state = SimpleNamespace(routes={}, requests=[])

    def handler(request: httpx.Request) -> httpx.Response:
        state.requests.append(request)
        canned = state.routes.get(request.url.host)
        if canned is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(
            canned.status_code, headers=canned.headers, content=canned.content
        )

    http_module._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return state


@pytest.fixture
def configured(temp_config_dir, sample_config_dict) -> Config:
    config = convert_config(sample_config_dict)
    save_config(config)
    return config


class TestUrlSourceId:
    """Tests for url_source_id."""

    def test_uses_host(self):
        assert url_source_id(1, "https://api.example.com/v1/rates") == "1:api.example.com"

    def test_without_host(self):
        assert url_source_id(2, "/relative") == "2:source"


class TestBuildSources:
    """Tests for build_sources."""

    def test_urls_get_descending_priority(self):
        sources = build_sources(
            Config(), ["https://a.example.com", "https://b.example.com"], []
        )

        assert [s.id for s in sources] == ["1:a.example.com", "2:b.example.com"]
        assert [s.priority for s in sources] == [2, 1]
        assert all(s.retries == 0 for s in sources)

    def test_defaults_to_enabled_sources(self, configured):
        sources = build_sources(configured, [], [])
        assert sorted(s.id for s in sources) == ["mirror", "primary"]

    def test_source_settings_are_used(self, configured):
        (mirror,) = build_sources(configured, [], ["mirror"])

        assert mirror.priority == 5
        assert mirror.timeout == 2.5
        assert mirror.transform({"data": {"rates": 1}}) == 1

    def test_overrides_apply(self, configured):
        (primary,) = build_sources(configured, [], ["primary"], retries=0, timeout=1.0)

        assert primary.retries == 0
        assert primary.timeout == 1.0

    def test_urls_rank_above_configured(self, configured):
        sources = build_sources(configured, ["https://c.example.com"], ["primary"])

        by_id = {s.id: s for s in sources}
        assert by_id["1:c.example.com"].priority > by_id["primary"].priority

    def test_unknown_source(self, configured):
        with pytest.raises(SourceSelectionError, match="nope"):
            build_sources(configured, [], ["nope"])

    def test_nothing_selected(self):
        with pytest.raises(SourceSelectionError):
            build_sources(Config(), [], [])


class TestExitCodeFor:
    """Tests for exit_code_for."""

    def test_success(self):
        result = AggregationResult(
            data=1, sources=[SourceOutcome(id="a", success=True)], strategy="fastest"
        )
        assert exit_code_for(result) == ExitCode.SUCCESS

    def test_partial(self):
        result = AggregationResult(
            data=1,
            sources=[
                SourceOutcome(id="a", success=False, error="x"),
                SourceOutcome(id="b", success=True),
            ],
            strategy="first-success",
        )
        assert exit_code_for(result) == ExitCode.PARTIAL_FAILURE

    def test_total_failure(self):
        result = AggregationResult(
            data=None,
            sources=[SourceOutcome(id="a", success=False, error="x")],
            strategy="merge",
        )
        assert exit_code_for(result) == ExitCode.NETWORK_ERROR


class TestFetchCommand:
    """Tests for the fetch command."""

    def test_json_success(self, responses):
        responses.routes["a.example.com"] = httpx.Response(200, json={"rate": 1.5})

        result = runner.invoke(
            app, ["--json", "fetch", "https://a.example.com/rates"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["data"] == {"rate": 1.5}
        assert data["strategy"] == "first-success"
        assert data["sources"][0]["id"] == "1:a.example.com"
        assert "data" not in data["sources"][0]

    def test_partial_failure(self, responses):
        responses.routes["good.example.com"] = httpx.Response(200, json=[1])

        result = runner.invoke(
            app,
            [
                "--json",
                "fetch",
                "https://bad.example.com",
                "https://good.example.com",
            ],
        )

        assert result.exit_code == ExitCode.PARTIAL_FAILURE
        data = json.loads(result.stdout)
        assert data["data"] == [1]
        assert [s["success"] for s in data["sources"]] == [False, True]
        assert data["sources"][0]["category"] == "network"

    def test_total_failure(self, responses):
        result = runner.invoke(app, ["fetch", "https://bad.example.com"])

        assert result.exit_code == ExitCode.NETWORK_ERROR
        assert "No source returned data" in result.stdout

    def test_merge_strategy_and_path(self, responses):
        responses.routes["a.example.com"] = httpx.Response(200, json={"data": {"x": 1}})
        responses.routes["b.example.com"] = httpx.Response(200, json={"data": {"y": 2}})

        result = runner.invoke(
            app,
            [
                "--json",
                "fetch",
                "--strategy",
                "merge",
                "--path",
                "data",
                "https://a.example.com",
                "https://b.example.com",
            ],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["strategy"] == "merge"
        assert data["data"] == {"x": 1, "y": 2}

    def test_url_query_is_kept(self, responses):
        responses.routes["a.example.com"] = httpx.Response(200, json=1)

        runner.invoke(app, ["fetch", "https://a.example.com/v?base=USD"])

        (request,) = responses.requests
        assert request.url.params["base"] == "USD"

    def test_configured_sources(self, responses, configured):
        responses.routes["primary.example.com"] = httpx.Response(200, json={"v": "primary"})
        responses.routes["mirror.example.com"] = httpx.Response(
            200, json={"data": {"rates": {"v": "mirror"}}}
        )

        result = runner.invoke(app, ["--json", "fetch"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["strategy"] == "best-quality"
        assert data["data"] == {"v": "primary"}
        assert sorted(s["id"] for s in data["sources"]) == ["mirror", "primary"]

    def test_mirror_header_is_sent(self, responses, configured):
        responses.routes["mirror.example.com"] = httpx.Response(
            200, json={"data": {"rates": 7}}
        )

        runner.invoke(app, ["fetch", "--source", "mirror"])

        (request,) = responses.requests
        assert request.headers["Authorization"] == "Bearer token"

    def test_verbose_includes_source_data(self, responses):
        responses.routes["a.example.com"] = httpx.Response(200, json={"rate": 1.5})

        # Keep debug logs out of the captured output
        with patch("multisource.cli.app.configure_logging"):
            result = runner.invoke(
                app, ["--json", "--verbose", "fetch", "https://a.example.com"]
            )

        data = json.loads(result.stdout)
        assert data["sources"][0]["data"] == {"rate": 1.5}

    def test_rich_output(self, responses):
        responses.routes["a.example.com"] = httpx.Response(200, json={"rate": 1.5})

        result = runner.invoke(app, ["fetch", "https://a.example.com"])

        assert result.exit_code == 0
        assert "strategy: first-success" in result.stdout
        assert "1.5" in result.stdout

    def test_unknown_source(self, responses):
        result = runner.invoke(app, ["--json", "fetch", "--source", "nope"])

        assert result.exit_code == ExitCode.CONFIG_ERROR
        data = json.loads(result.stdout)
        assert data["error"]["message"] == "Unknown source: nope"
        assert data["error"]["category"] == "configuration"

    def test_no_sources(self, responses):
        result = runner.invoke(app, ["fetch"])

        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "No sources given" in result.stdout

    def test_unknown_strategy_rejected(self, responses):
        result = runner.invoke(
            app, ["fetch", "--strategy", "loudest", "https://a.example.com"]
        )

        assert result.exit_code == 2
        assert responses.requests == []

    def test_client_closed_after_fetch(self, responses):
        responses.routes["a.example.com"] = httpx.Response(200, json=1)

        runner.invoke(app, ["fetch", "https://a.example.com"])

        assert http_module._client is None


class TestSourcesCommand:
    """Tests for the sources command."""

    def test_no_sources(self, temp_config_dir):
        result = runner.invoke(app, ["sources"])

        assert result.exit_code == 0
        assert "No sources configured" in result.stdout

    def test_table(self, configured):
        result = runner.invoke(app, ["sources"])

        assert result.exit_code == 0
        assert "primary" in result.stdout
        assert "legacy" in result.stdout
        assert "2.5s" in result.stdout

    def test_quiet_lists_ids_by_priority(self, configured):
        result = runner.invoke(app, ["--quiet", "sources"])

        assert result.stdout.split() == ["primary", "mirror", "legacy"]

    def test_json(self, configured):
        result = runner.invoke(app, ["--json", "sources"])

        data = json.loads(result.stdout)
        assert list(data) == ["primary", "mirror", "legacy"]
        assert data["legacy"]["enabled"] is False
        assert data["mirror"]["json_path"] == "data.rates"
        assert data["primary"]["name"] == "primary"
