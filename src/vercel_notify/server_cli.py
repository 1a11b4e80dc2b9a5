"""CLI entry point for the vercel-notify server."""

import argparse
import os

from vercel_notify.config import load_settings


def main(argv: list[str] | None = None) -> None:
    settings = load_settings()

    parser = argparse.ArgumentParser(
        prog="vercel-notify-server",
        description="Relay signed Vercel webhooks to Telegram",
    )
    parser.add_argument("--host", default=settings.host, help=f"Bind host (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Bind port (default: {settings.port})")
    parser.add_argument(
        "--log-level",
        default=settings.log_level.lower(),
        choices=["debug", "info", "warning", "error"],
        help=f"Log level (default: {settings.log_level})",
    )
    args = parser.parse_args(argv)

    # read by load_settings() when uvicorn imports the app
    os.environ["LOG_LEVEL"] = args.log_level

    import uvicorn

    uvicorn.run("vercel_notify.main:app", host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
