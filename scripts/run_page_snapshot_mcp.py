#!/usr/bin/env python3
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

print(
    f"[mcp] cdp={os.environ.get('MCP_BROWSER_HOST', '127.0.0.1')}:{os.environ.get('MCP_BROWSER_PORT', '9222')} | "
    f"snapshot_timeout={os.environ.get('MCP_SNAPSHOT_TIMEOUT', 'default')}",
    file=sys.stderr,
)

from mcp_servers.page_snapshot.main import main  # noqa: E402

if __name__ == "__main__":
    main()
