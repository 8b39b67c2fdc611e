from __future__ import annotations

import asyncio
import json
from typing import Any

from fake_browser import FakeBrowser
from mcp_servers.page_snapshot.config import SnapshotConfig
from mcp_servers.page_snapshot.main import McpServer
from mcp_servers.page_snapshot.server.contract import LATEST_PROTOCOL_VERSION, SERVER_INFO, tools_list
from mcp_servers.page_snapshot.server.handlers import ALL_HANDLERS
from mcp_servers.page_snapshot.server.redaction import redact_tool_arguments
from mcp_servers.page_snapshot.server.registry import ToolRegistry, create_default_registry
from mcp_servers.page_snapshot.server.types import ToolResult


def _server(fake: FakeBrowser | None = None) -> tuple[McpServer, list[dict[str, Any]]]:
    out: list[dict[str, Any]] = []
    server = McpServer(SnapshotConfig(), bridge=fake or FakeBrowser(), write=out.append)
    return server, out


def _payload(result: ToolResult) -> Any:
    return json.loads(result.content[0].text)


def test_every_defined_tool_has_a_handler() -> None:
    names = {t["name"] for t in tools_list()}
    assert names == set(ALL_HANDLERS)
    registry = create_default_registry()
    assert sorted(registry.tool_names) == sorted(names)
    for tool in tools_list():
        assert tool["inputSchema"]["type"] == "object"


def test_registry_dispatch_and_unknown_tool() -> None:
    async def handler(_ctx, args):  # noqa: ANN001
        return ToolResult.json({"echo": args})

    registry = ToolRegistry()
    registry.register("echo", handler)
    assert registry.has("echo")
    res = asyncio.run(registry.dispatch("echo", None, {"a": 1}))  # type: ignore[arg-type]
    assert res.data == {"echo": {"a": 1}}
    try:
        asyncio.run(registry.dispatch("nope", None, {}))  # type: ignore[arg-type]
    except KeyError as exc:
        assert "nope" in str(exc)
    else:
        raise AssertionError("expected KeyError")


def test_snapshot_then_click_through_the_server() -> None:
    async def _main() -> None:
        fake = FakeBrowser()
        server, _out = _server(fake)
        snap = await server.call_tool("take_snapshot", {})
        assert not snap.is_error
        assert 'uid=e3 button "Save"' in snap.content[0].text

        clicked = await server.call_tool("click_element_by_uid", {"uid": "e3"})
        assert not clicked.is_error
        assert _payload(clicked)["uid"] == "e3"

        found = await server.call_tool("search_snapshot", {"query": "Sub*|Log*", "contextLevels": 0})
        assert found.content[0].text.split("\n") == [
            '  uid=e7 button "Submit"',
            '  uid=e8 link "Login help" url="https://example.test/help"',
        ]

    asyncio.run(_main())


def test_tool_errors_carry_their_kind() -> None:
    async def _main() -> None:
        server, _out = _server()
        await server.call_tool("take_snapshot", {})
        await server.call_tool("take_snapshot", {})

        stale = await server.call_tool("click_element_by_uid", {"uid": "e3"})
        assert stale.is_error
        assert stale.data["kind"] == "StaleSnapshot"
        assert "take_snapshot" in stale.data["suggestion"]

        not_input = await server.call_tool("fill_element_by_uid", {"uid": "e12", "value": "x"})
        assert not_input.data["kind"] == "NotAnInputField"

        missing_arg = await server.call_tool("click_element_by_uid", {})
        assert missing_arg.is_error
        assert missing_arg.data["kind"] == "InvalidArguments"

        unknown = await server.call_tool("teleport", {})
        assert unknown.is_error
        assert unknown.data["error"] == "Unknown tool: teleport"

    asyncio.run(_main())


def test_no_tabs_is_reported() -> None:
    server, _out = _server(FakeBrowser(tabs=[], pages={}))
    res = asyncio.run(server.call_tool("take_snapshot", {}))
    assert res.is_error
    assert res.data["kind"] == "NoActiveTab"


def test_jsonrpc_dispatch() -> None:
    async def _main() -> list[dict[str, Any]]:
        server, out = _server()
        server.dispatch({"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {"protocolVersion": "1999"}})
        server.dispatch({"jsonrpc": "2.0", "method": "notifications/initialized"})
        server.dispatch({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})
        task = server.dispatch(
            {"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {"name": "get_page_info", "arguments": {}}}
        )
        server.dispatch({"jsonrpc": "2.0", "id": 4, "method": "ping"})
        server.dispatch({"jsonrpc": "2.0", "id": 5, "method": "resources/list"})
        await task
        await server.drain()
        return out

    out = asyncio.run(_main())
    by_id = {m["id"]: m for m in out}
    assert by_id[1]["result"]["protocolVersion"] == LATEST_PROTOCOL_VERSION
    assert by_id[1]["result"]["serverInfo"] == SERVER_INFO
    assert len(by_id[2]["result"]["tools"]) == len(tools_list())
    assert by_id[4]["result"] == {}
    assert by_id[5]["error"]["code"] == -32601
    call = by_id[3]["result"]
    assert call["isError"] is False
    assert json.loads(call["content"][0]["text"])["id"] == "t1"


def test_malformed_messages_get_error_replies() -> None:
    async def _main() -> list[dict[str, Any]]:
        server, out = _server()
        assert server.dispatch([1, 2]) is None
        assert server.dispatch("ping") is None
        server.dispatch({"jsonrpc": "2.0", "id": 7, "method": "tools/call", "params": ["take_snapshot"]})
        bad_args = {"name": "take_snapshot", "arguments": [1]}
        server.dispatch({"jsonrpc": "2.0", "id": 8, "method": "tools/call", "params": bad_args})
        task = server.dispatch({"jsonrpc": "2.0", "id": 9, "method": "tools/call", "params": {"name": "get_page_info"}})
        await task
        return out

    out = asyncio.run(_main())
    assert [m["error"]["code"] for m in out[:2]] == [-32600, -32600]
    assert out[0]["id"] is None
    by_id = {m["id"]: m for m in out[2:]}
    assert by_id[7]["error"]["code"] == -32602
    assert by_id[8]["error"]["code"] == -32602
    assert by_id[9]["result"]["isError"] is False


def test_redaction_hides_filled_values() -> None:
    safe = redact_tool_arguments("fill_element_by_uid", {"uid": "e4", "value": "hunter2"})
    assert safe == {"uid": "e4", "value": "<redacted str len=7>"}
    assert redact_tool_arguments("click_element_by_uid", {"uid": "e3"}) == {"uid": "e3"}
    assert redact_tool_arguments("navigate_to_url", {"url": "x", "token": "abc"})["token"] == "<redacted str len=3>"
    assert redact_tool_arguments("take_snapshot", None) == {}  # type: ignore[arg-type]
