"""Storage components for pdfaudify.

This package contains the storage gateway interface plus filesystem and Google
Cloud Storage implementations used by the pipeline.
"""

from .gcs_storage import GcsStorageGateway
from .storage import LocalArtifactStore, StorageGateway, WriteHandle

__all__ = ["GcsStorageGateway", "LocalArtifactStore", "StorageGateway", "WriteHandle"]
