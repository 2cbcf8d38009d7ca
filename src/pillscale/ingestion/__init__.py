"""Ingestion layer.

This package contains the adapters between a device transport and the
engine: text/byte normalization and the notification queue.
"""

__all__: list[str] = []
