# tests/helpers/__init__.py
"""Helper utilities for FCM client tests."""

from __future__ import annotations

from .transport import RecordingTransport, response

__all__ = ["RecordingTransport", "response"]
