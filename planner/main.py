"""
Entry point — start the study planner API.

Usage:
    python -m planner.main
    uvicorn planner.api.app:app --host 127.0.0.1 --port 8770 --reload
"""

import uvicorn
from .config import config


def main():
    uvicorn.run(
        "planner.api.app:app",
        host=config.api_host,
        port=config.api_port,
        reload=False,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
