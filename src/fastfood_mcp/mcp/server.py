"""
MCP server exposing the error, service and feature-flag catalog tools.

``MCPServer`` is the in-process registry (used directly by tests and by
in-process callers); ``build_fastmcp`` binds that registry to the MCP SDK for
the stdio and streamable-HTTP transports.
"""

from __future__ import annotations

import functools
import inspect
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import click
import structlog
from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from fastfood_mcp.app.container import DataStores, build_stores
from fastfood_mcp.app.core.config import Settings, load_settings
from fastfood_mcp.app.core.logging_config import configure_logging
from fastfood_mcp.app.core.metrics import record_latency, record_tool_call, render_latest
from fastfood_mcp.app.core.otel import get_tracer, init_tracer
from fastfood_mcp.app.store.errors import FatalLoadError
from fastfood_mcp.mcp.errors import ToolError, ToolNotFoundError
from fastfood_mcp.mcp.tools import errors as error_tools
from fastfood_mcp.mcp.tools import flags as flag_tools
from fastfood_mcp.mcp.tools import services as service_tools
from fastfood_mcp.mcp.tools import system as system_tools

logger = structlog.get_logger(__name__)


@dataclass
class ToolSpec:
    name: str
    func: Callable[..., Any]
    description: str


def _instrumented(name: str, func: Callable[..., Any]) -> Callable[..., Any]:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        with get_tracer().start_as_current_span(f"tool.{name}"), record_latency(name):
            try:
                result = func(*args, **kwargs)
            except ToolError:
                record_tool_call(name, "rejected")
                raise
            except Exception:
                record_tool_call(name, "failed")
                logger.exception("tool_failed", tool=name)
                raise
            record_tool_call(name, "ok")
            return result

    return wrapper


class MCPServer:
    def __init__(self, name: str = "fastfood-mcp", version: str = "0.1.0") -> None:
        self.name = name
        self.version = version
        self.tools: Dict[str, ToolSpec] = {}

    def register_tool(self, name: str, func: Callable[..., Any], description: Optional[str] = None) -> None:
        doc = description or inspect.getdoc(func) or ""
        self.tools[name] = ToolSpec(name=name, func=_instrumented(name, func), description=doc)

    def list_tools(self) -> List[Dict[str, str]]:
        return [{"name": t.name, "description": t.description} for t in sorted(self.tools.values(), key=lambda t: t.name)]

    def call(self, name: str, **kwargs: Any) -> Any:
        if name not in self.tools:
            raise ToolNotFoundError(f"Tool not found: {name}")
        return self.tools[name].func(**kwargs)


def register_catalog_tools(server: MCPServer, stores: DataStores, settings: Settings) -> MCPServer:
    """Register every catalog tool, bound to ``stores``."""
    hints = {"top_n": settings.suggestion_top_n, "min_score": settings.suggestion_min_score}

    def explain_error(code: str, service: Optional[str] = None, trace_id: Optional[str] = None) -> Dict[str, Any]:
        """Explain an internal error code and suggest steps"""
        return error_tools.explain_error(stores.errors, code, service, trace_id, **hints)

    def search_errors(query: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Search error catalog by keyword"""
        return error_tools.search_errors(stores.errors, query, limit, limit_cap=settings.search_limit_cap)

    def suggest_fix(code: str) -> List[Dict[str, str]]:
        """Get fix steps for an error code"""
        return error_tools.suggest_fix(stores.errors, code, **hints)

    def get_service(name: str) -> Dict[str, Any]:
        """Fetch a service's metadata"""
        return service_tools.get_service(stores.system, name, **hints)

    def list_dependencies(name: str, direction: str = "outbound", depth: int = 1) -> List[Dict[str, str]]:
        """List a service's inbound/outbound dependencies ('inbound' = services that depend on it)"""
        return service_tools.list_dependencies(stores.system, name, direction, depth)

    def find_endpoint(name: str, path: Optional[str] = None) -> List[Dict[str, Any]]:
        """List API endpoints for a service, optionally filtered by a partial path"""
        return service_tools.find_endpoint(stores.system, name, path)

    def service_owner(name: str) -> Dict[str, Optional[str]]:
        """Get owning team and contact info for a service"""
        return service_tools.service_owner(stores.system, name)

    def list_flags(service: Optional[str] = None) -> List[Dict[str, Optional[str]]]:
        """List feature flags, optionally scoped to a service"""
        return flag_tools.list_flags(stores.flags, service)

    def get_flag(key: str) -> Dict[str, Any]:
        """Get full flag definition"""
        return flag_tools.get_flag(stores.flags, key, **hints)

    def flag_status(key: str, environment: str) -> Dict[str, Any]:
        """Resolve a flag's value in an environment (e.g. 'dev', 'staging', 'prod')"""
        return flag_tools.flag_status(stores.flags, key, environment, **hints)

    for func in (
        explain_error,
        search_errors,
        suggest_fix,
        get_service,
        list_dependencies,
        find_endpoint,
        service_owner,
        list_flags,
        get_flag,
        flag_status,
    ):
        server.register_tool(func.__name__, func)
    return server


def build_fastmcp(server: MCPServer, stores: DataStores, settings: Settings) -> FastMCP:
    app = FastMCP(settings.server_name, host=settings.http_host, port=settings.http_port)
    for tool in server.tools.values():
        app.add_tool(tool.func, name=tool.name, description=tool.description)

    @app.custom_route("/health", methods=["GET"])
    async def health_route(request: Request) -> Response:
        return JSONResponse(system_tools.health(stores, settings.server_name, settings.server_version))

    @app.custom_route("/metrics", methods=["GET"])
    async def metrics_route(request: Request) -> Response:
        body, content_type = render_latest()
        return Response(content=body, media_type=content_type)

    return app


@click.command()
@click.option("--transport", type=click.Choice(["stdio", "http"]), default=None, help="Defaults to FASTFOOD_TRANSPORT or stdio")
@click.option("--host", default=None, help="HTTP bind host")
@click.option("--port", type=int, default=None, help="HTTP bind port")
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), default=None, help="Directory holding the JSON data files")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None, help="YAML settings file")
def main(
    transport: Optional[str],
    host: Optional[str],
    port: Optional[int],
    data_dir: Optional[Path],
    config_path: Optional[str],
) -> None:
    settings = load_settings(config_path, transport=transport, http_host=host, http_port=port, data_dir=data_dir)
    configure_logging(settings)
    init_tracer(settings.server_name, settings.otel_endpoint)

    try:
        stores = build_stores(settings)
    except FatalLoadError as exc:
        raise click.ClickException(str(exc)) from exc

    server = register_catalog_tools(MCPServer(settings.server_name, settings.server_version), stores, settings)
    app = build_fastmcp(server, stores, settings)
    logger.info(
        "server_starting",
        transport=settings.transport,
        tools=len(server.tools),
        data_dir=str(settings.data_dir),
    )
    try:
        app.run(transport="stdio" if settings.transport == "stdio" else "streamable-http")
    finally:
        stores.close()


if __name__ == "__main__":
    main()
