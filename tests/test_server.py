import asyncio

import pytest
from starlette.testclient import TestClient

from fastfood_mcp.mcp.errors import NotFoundError, ToolNotFoundError
from fastfood_mcp.mcp.server import MCPServer, build_fastmcp, register_catalog_tools
from fastfood_mcp.mcp.tools.system import health

CATALOG_TOOLS = [
    "explain_error",
    "find_endpoint",
    "flag_status",
    "get_flag",
    "get_service",
    "list_dependencies",
    "list_flags",
    "search_errors",
    "service_owner",
    "suggest_fix",
]


@pytest.fixture
def server(stores, settings):
    return register_catalog_tools(MCPServer(settings.server_name, settings.server_version), stores, settings)


def test_all_catalog_tools_are_registered(server):
    tools = server.list_tools()
    assert [t["name"] for t in tools] == CATALOG_TOOLS
    assert all(t["description"] for t in tools)


def test_call_dispatches_to_tool(server):
    assert server.call("explain_error", code="pay-2001")["code"] == "PAY-2001"
    assert server.call("list_dependencies", name="menu", direction="inbound") == [
        {"name": "kitchen"},
        {"name": "orders"},
    ]


def test_call_unknown_tool(server):
    with pytest.raises(ToolNotFoundError, match="Tool not found: nope"):
        server.call("nope")


def test_tool_errors_propagate_through_instrumentation(server):
    with pytest.raises(NotFoundError):
        server.call("get_flag", key="does.not.exist")


def test_unexpected_errors_propagate():
    srv = MCPServer()

    def broken() -> None:
        """Always fails."""
        raise RuntimeError("boom")

    srv.register_tool("broken", broken)
    assert srv.list_tools() == [{"name": "broken", "description": "Always fails."}]
    with pytest.raises(RuntimeError, match="boom"):
        srv.call("broken")


def test_health_reports_healthy_stores(stores):
    report = health(stores, "fastfood-mcp", "0.1.0")
    assert report["status"] == "healthy"
    assert set(report["stores"]) == {"errors", "system", "flags"}
    errors = report["stores"]["errors"]
    assert errors["reloads"] == 0
    assert errors["failures"] == 0
    assert errors["lastError"] is None
    assert errors["loadedAt"].endswith("Z")


def test_health_degrades_after_failed_reload(stores, data_dir, notifiers, scheduler):
    (data_dir / "flags.json").write_text('{"flags": [', encoding="utf-8")
    notifiers["flags.json"].fire()
    scheduler.run_pending()

    report = health(stores)
    assert report["status"] == "degraded"
    assert report["stores"]["flags"]["failures"] == 1
    assert report["stores"]["flags"]["lastError"].startswith("malformed data file")
    # tools keep answering from the last good snapshot
    assert len(stores.flags.current().flags) == 3


def test_fastmcp_exposes_catalog_tools(server, stores, settings):
    app = build_fastmcp(server, stores, settings)
    tools = asyncio.run(app.list_tools())
    assert sorted(t.name for t in tools) == CATALOG_TOOLS


def test_fastmcp_schema_follows_tool_signatures(server, stores, settings):
    app = build_fastmcp(server, stores, settings)
    tools = {t.name: t for t in asyncio.run(app.list_tools())}
    props = tools["list_dependencies"].inputSchema["properties"]
    assert props["depth"]["type"] == "integer"
    assert tools["list_dependencies"].inputSchema["required"] == ["name"]


def test_http_health_and_metrics_routes(server, stores, settings):
    client = TestClient(build_fastmcp(server, stores, settings).streamable_http_app())

    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["server"] == settings.server_name
    assert body["version"] == settings.server_version
    assert set(body["stores"]) == {"errors", "system", "flags"}

    response = client.get("/metrics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "fastfood_store_events_total" in response.text
