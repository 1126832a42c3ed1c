"""Module entrypoint.

Allows:
    python -m mcp_memcheck_server
"""

from __future__ import annotations

from mcp_memcheck_server.server.memcheck_server import main

if __name__ == "__main__":
    main()
