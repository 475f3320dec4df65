"""Module entrypoint.

Allows:
    python -m mcp_job_timeline_server
"""

from __future__ import annotations

from mcp_job_timeline_server.server.timeline_server import main

if __name__ == "__main__":
    main()
