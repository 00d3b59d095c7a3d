"""reviewauth entrypoint.

Run with:
  python -m reviewauth
"""

import os
import uvicorn

from reviewauth.logging_config import get_logging_config

def main() -> None:
    host = os.getenv("REVIEWAUTH_HOST", "0.0.0.0")
    port = int(os.getenv("REVIEWAUTH_PORT", "8000"))
    reload = os.getenv("REVIEWAUTH_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run(
        "reviewauth.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=get_logging_config(os.getenv("REVIEWAUTH_LOG_LEVEL", "INFO").upper()),
    )

if __name__ == "__main__":
    main()
