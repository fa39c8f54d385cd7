"""
Reclaim API Module.

Async httpx client for the Reclaim REST API, the records it returns,
and the translation of HTTP/transport failures into ReclaimError.
"""

from reclaim_cli.api.client import ReclaimClient

__all__ = ["ReclaimClient"]
