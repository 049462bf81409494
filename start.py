#!/usr/bin/env python3
"""
Run the MindShield API with uvicorn.

``HOST`` and ``PORT`` come from the environment (or ``.env``) through the
application settings; ``--reload`` is meant for local development.
"""

import argparse

import uvicorn

from config.settings import settings


def main():
    parser = argparse.ArgumentParser(description="Start the MindShield API server")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    args = parser.parse_args()

    print(f"Starting MindShield {settings.app_version} on {args.host}:{args.port} ({settings.environment})")
    if settings.watcher.enabled:
        print(f"Watching {settings.watcher.recording_dir} for new call recordings")

    uvicorn.run("mindshield.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
