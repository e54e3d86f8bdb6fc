"""
couchdoc Python SDK - Client library for per-doctype CouchDB storage.

This SDK stores application documents in CouchDB, one database per
document type:
- Document contract (Doc) with JSONDoc and DocModel implementations
- Database naming and document id generation
- CouchClient for document and database operations

Example:
    >>> from couchdoc_sdk import CouchClient, JSONDoc
    >>>
    >>> async with CouchClient("http://localhost:5984/") as db:
    ...     doc = JSONDoc({"doctype": "io.cozy.files", "name": "notes.txt"})
    ...     await db.create_doc("cozy-", doc)
    ...     print(doc.id, doc.rev)

Invariants:
    - Every (prefix, doctype) maps to exactly one database
    - Document ids are "<doctype>/<32 hex chars>"
    - Databases are created lazily on first write

Version: 1.0.0
"""

__version__ = "1.0.0"

from .client import CouchClient, UpdateResponse
from .config import Settings
from .document import Doc, DocModel, JSONDoc
from .errors import (
    ConnectionError,
    CouchDocError,
    DecodingError,
    EncodingError,
    ProtocolError,
    RequestError,
    ResponseReadError,
    ServerError,
    ValidationError,
)
from .naming import doc_path, gen_doc_id, make_db_name

__all__ = [
    # Version
    "__version__",
    # Documents
    "Doc",
    "DocModel",
    "JSONDoc",
    # Naming
    "make_db_name",
    "doc_path",
    "gen_doc_id",
    # Client
    "CouchClient",
    "UpdateResponse",
    "Settings",
    # Errors
    "CouchDocError",
    "RequestError",
    "ConnectionError",
    "ResponseReadError",
    "ServerError",
    "EncodingError",
    "DecodingError",
    "ProtocolError",
    "ValidationError",
]
