from __future__ import annotations

import asyncio

import pytest

from fake_browser import FakeBrowser
from mcp_servers.page_snapshot.bridge import TabInfo
from mcp_servers.page_snapshot.errors import ElementNotActionable, StaleSnapshot
from mcp_servers.page_snapshot.locator import ElementHandle
from mcp_servers.page_snapshot.manager import SnapshotManager


def test_generations_increase_and_old_uids_go_stale() -> None:
    async def _main() -> None:
        manager = SnapshotManager(FakeBrowser())
        first = await manager.create_snapshot("t1")
        assert first.generation == 1
        assert manager.get_node_by_uid("t1", "e3").name == "Save"

        second = await manager.create_snapshot("t1")
        assert second.generation == 2
        assert manager.get_snapshot("t1") is second
        assert manager.get_node_by_uid("t1", "e3") is None
        assert set(first.uids).isdisjoint(second.uids)
        with pytest.raises(StaleSnapshot):
            manager.get_element_by_uid("t1", "e3")
        # The same button lives on under a new uid.
        save = [n for n, _d in second.root.walk() if n.name == "Save"][0]
        handle = manager.get_element_by_uid("t1", save.uid)
        assert isinstance(handle, ElementHandle)
        assert handle.backend_node_id == 3

    asyncio.run(_main())


def test_same_page_gives_same_text() -> None:
    async def _main() -> tuple[str, str]:
        a = SnapshotManager(FakeBrowser())
        b = SnapshotManager(FakeBrowser())
        return (
            a.format_snapshot(await a.create_snapshot("t1")),
            b.format_snapshot(await b.create_snapshot("t1")),
        )

    left, right = asyncio.run(_main())
    assert left == right
    assert left.split("\n")[2] == '  uid=e3 button "Save"'


def test_concurrent_snapshots_last_commit_wins() -> None:
    async def _main() -> None:
        manager = SnapshotManager(FakeBrowser())
        snaps = await asyncio.gather(*(manager.create_snapshot("t1") for _ in range(3)))
        assert sorted(s.generation for s in snaps) == [1, 2, 3]
        current = manager.get_snapshot("t1")
        assert current.generation == 3
        all_uids = [uid for s in snaps for uid in s.uids]
        assert len(all_uids) == len(set(all_uids))

    asyncio.run(_main())


def test_tabs_do_not_share_snapshots() -> None:
    async def _main() -> None:
        tabs = [TabInfo(id="t1", url="https://a.test", title="A"), TabInfo(id="t2", url="https://b.test", title="B")]
        manager = SnapshotManager(FakeBrowser(tabs=tabs))
        await manager.create_snapshot("t1")
        await manager.create_snapshot("t1")
        other = await manager.create_snapshot("t2")
        assert other.generation == 1
        assert manager.get_node_by_uid("t2", "e3").name == "Save"
        assert manager.get_node_by_uid("t1", "e3") is None

        assert manager.retain_tabs(["t2"]) == ["t1"]
        assert manager.get_snapshot("t1") is None
        manager.drop_tab("t2")
        assert manager.get_snapshot("t2") is None

    asyncio.run(_main())


def test_search_takes_a_snapshot_when_none_exists() -> None:
    async def _main() -> None:
        manager = SnapshotManager(FakeBrowser())
        result = await manager.search_and_format("t1", "Sub*|Log*", 1)
        assert manager.get_snapshot("t1").generation == 1
        assert result.split("\n") == [
            '  uid=e6 checkbox "Remember me" checked',
            '  uid=e7 button "Submit"',
            '  uid=e8 link "Login help" url="https://example.test/help"',
            '  uid=e9 StaticText "Welcome back"',
        ]
        # Existing snapshot is reused.
        assert await manager.search_and_format("t1", "Sub*|Log*", 1) == result
        assert manager.get_snapshot("t1").generation == 1
        assert await manager.search_and_format("t1", "nope") is None

    asyncio.run(_main())


def test_unknown_uid_and_structural_nodes() -> None:
    async def _main() -> None:
        manager = SnapshotManager(FakeBrowser())
        with pytest.raises(StaleSnapshot):
            manager.get_element_by_uid("t1", "e3")

        await manager.create_snapshot("t1")
        with pytest.raises(StaleSnapshot):
            manager.get_element_by_uid("t1", "e404")
        # Text nodes have no DOM element of their own.
        assert manager.get_element_by_uid("t1", "e9") is None
        with pytest.raises(ElementNotActionable):
            async with manager.element("t1", "e9"):
                pass

    asyncio.run(_main())


def test_save_button_end_to_end() -> None:
    async def _main() -> None:
        fake = FakeBrowser()
        manager = SnapshotManager(fake)
        snap = await manager.create_snapshot("t1")
        assert snap.get("e3").name == "Save"

        handle = manager.get_element_by_uid("t1", "e3")
        try:
            clicked = await handle.as_locator().click()
        finally:
            await handle.dispose()
        assert clicked["clickCount"] == 1
        assert [p["type"] for p in fake.methods("Input.dispatchMouseEvent")] == [
            "mouseMoved",
            "mousePressed",
            "mouseReleased",
        ]

        fresh = await manager.create_snapshot("t1")
        assert "e3" not in fresh
        with pytest.raises(StaleSnapshot):
            manager.get_element_by_uid("t1", "e3")

    asyncio.run(_main())
