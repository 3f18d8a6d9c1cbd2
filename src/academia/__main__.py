"""Run the Academia API server."""

from __future__ import annotations

import argparse

import uvicorn

from academia.config import Settings
from academia.logging import setup_logging


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="academia", description="Academia API server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    setup_logging(log_dir=settings.log_dir, level=settings.log_level)
    uvicorn.run(
        "academia.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
