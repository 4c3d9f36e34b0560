"""
Adapters package - External storage connections.
"""

from adapters.blob_store import LocalBlobStore, DeleteStatus

__all__ = [
    "LocalBlobStore",
    "DeleteStatus",
]
