"""Run the multi-source agent HTTP service locally.

Development mode enables uvicorn's auto-reload; other environments serve the
imported app object directly.
"""

from __future__ import annotations

import uvicorn

from multisource.core.config import get_settings


def main() -> None:
    settings = get_settings()
    if settings.app_env == "development":
        uvicorn.run(
            "multisource.llm.main:app",
            host=settings.agent_host,
            port=settings.agent_port,
            reload=True,
        )
        return

    from multisource.llm.main import app

    uvicorn.run(app, host=settings.agent_host, port=settings.agent_port, reload=False)


if __name__ == "__main__":
    main()
