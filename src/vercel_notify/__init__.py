"""Relay Vercel webhook events to a Telegram chat."""

__version__ = "1.0.0"
