#!/usr/bin/env python3
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

print(
    f"[mcp] cdp={os.environ.get('MCP_BROWSER_HOST', '127.0.0.1')}:{os.environ.get('MCP_BROWSER_PORT', '9222')} | "
    f"format={os.environ.get('MCP_RESPONSE_FORMAT', 'json')} | "
    f"images={os.environ.get('MCP_IMAGE_RESPONSES', 'include')} | "
    f"allowlist={os.environ.get('MCP_ALLOW_HOSTS', '*')}",
    file=sys.stderr,
)

from mcp_servers.aria_browser.main import main  # noqa: E402

if __name__ == "__main__":
    main()
