from __future__ import annotations

import argparse
import os

import uvicorn

from newsletter.config import get_settings


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Newsletter subscription HTTP service")
    parser.add_argument("--host", default=settings.host, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to listen on")
    parser.add_argument("--storage-dir", default=None, help="Directory holding one file per subscriber")
    parser.add_argument("--log-level", default=settings.log_level, help="Root log level")
    args = parser.parse_args()

    if args.storage_dir:
        os.environ["STORAGE_DIR"] = args.storage_dir
    os.environ["LOG_LEVEL"] = args.log_level
    get_settings.cache_clear()

    uvicorn.run("newsletter.main:app", host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
