"""Custom file format pipeline: resolve content, extract or build, externalize."""

from .blobstore import (
    BlobStore,
    ExternalizedPayload,
    Externalizer,
    LocalBlobStore,
    VercelBlobStore,
    build_blob_store,
    generate_unique_file_name,
)
from .content import resolve_content, resolve_strings
from .processing import extract_strings, get_translation, translate_document

__all__ = [
    "BlobStore",
    "ExternalizedPayload",
    "Externalizer",
    "LocalBlobStore",
    "VercelBlobStore",
    "build_blob_store",
    "generate_unique_file_name",
    "resolve_content",
    "resolve_strings",
    "extract_strings",
    "get_translation",
    "translate_document",
]
