"""
CouchDB client for the couchdoc SDK.

This module provides the main client interface:
- CouchClient: Document operations against one CouchDB server
- UpdateResponse: Acknowledgement returned by a document write

Each doctype lives in its own database, named from a caller-supplied
prefix and the doctype. Databases are created lazily on first write.

Example:
    >>> async with CouchClient("http://localhost:5984/") as db:
    ...     doc = JSONDoc({"doctype": "io.cozy.files", "name": "notes.txt"})
    ...     await db.create_doc("cozy-", doc)
    ...     same = await db.get_doc("cozy-", "io.cozy.files", doc.id)

Invariants:
    - The client keeps no reference to documents after a call
    - A create never sends a document that already has an id
    - A missing database is created at most once per create, then the
      write is retried exactly once
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from ._http_client import HttpClient
from .config import Settings
from .document import Doc, JSONDoc
from .errors import (
    CouchDocError,
    ProtocolError,
    ServerError,
    ValidationError,
    WRONG_DOCTYPE_REASON,
)
from .naming import doc_path, gen_doc_id, make_db_name

logger = logging.getLogger(__name__)


class UpdateResponse(BaseModel):
    """CouchDB acknowledgement of a document write.

    Attributes:
        id: Identifier of the written document
        rev: New revision token
        ok: Whether CouchDB accepted the write
    """

    id: str
    rev: str
    ok: bool


class CouchClient:
    """Client for per-doctype document storage in CouchDB.

    Usage:
        >>> async with CouchClient("http://localhost:5984/") as db:
        ...     await db.create_doc("cozy-", doc)

    Or with explicit connection management:
        >>> db = CouchClient()
        >>> await db.connect()
        >>> try:
        ...     await db.reset_db("cozy-", "io.cozy.files")
        ... finally:
        ...     await db.close()
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5984/",
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize client.

        Args:
            base_url: CouchDB server URL
            timeout: Transport timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self._http = HttpClient(base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> CouchClient:
        """Build a client from environment configuration."""
        settings = settings or Settings()
        return cls(settings.couchdb_url, timeout=settings.timeout, **kwargs)

    @property
    def couch_url(self) -> str:
        """URL where to check if CouchDB is up."""
        return self._http.base_url

    async def connect(self) -> None:
        """Open the HTTP connection pool."""
        await self._http.connect()
        logger.info(f"Connected to CouchDB at {self.couch_url}")

    async def close(self) -> None:
        """Close the HTTP connection pool."""
        await self._http.close()

    async def __aenter__(self) -> CouchClient:
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def health(self) -> dict[str, Any]:
        """Check that CouchDB is up.

        Returns:
            Server welcome document, e.g. {"couchdb": "Welcome", "version": ...}
        """
        return await self._http.request("GET", "", out={})

    async def get_doc(
        self,
        prefix: str,
        doctype: str,
        doc_id: str,
        out: Doc | None = None,
    ) -> Doc:
        """Fetch a document by doctype and id.

        Args:
            prefix: Database name prefix
            doctype: Document type
            doc_id: Document id as set by create_doc, or the part of it
                after "<doctype>/"
            out: Optional document to fill (a JSONDoc is created otherwise)

        Returns:
            The filled document

        Raises:
            ServerError: With reason "wrong_doctype" if no database exists
                for the doctype, unchanged for any other server error
        """
        holder = out if out is not None else JSONDoc()
        # the stored key already is "<doctype>/<id>"
        key = doc_id.removeprefix(doctype + "/")
        try:
            return await self._http.request(
                "GET", doc_path(prefix, doctype, key), out=holder
            )
        except ServerError as e:
            if e.is_no_database:
                raise e.with_reason(WRONG_DOCTYPE_REASON) from e
            raise

    async def create_db(self, prefix: str, doctype: str) -> None:
        """Create the database for a doctype.

        Raises:
            ServerError: 412 file_exists if the database already exists
        """
        await self._http.request("PUT", make_db_name(prefix, doctype))

    async def delete_db(self, prefix: str, doctype: str) -> None:
        """Destroy the database for a doctype."""
        await self._http.request("DELETE", make_db_name(prefix, doctype))

    async def reset_db(self, prefix: str, doctype: str) -> None:
        """Destroy and recreate the database for a doctype.

        Not atomic: if creation fails the database stays absent until the
        caller creates it again. Creation is not attempted when deletion
        fails.
        """
        await self.delete_db(prefix, doctype)
        await self.create_db(prefix, doctype)

    async def _create_doc_or_db(self, prefix: str, doc: Doc) -> UpdateResponse:
        """POST a document, creating its database on the first write.

        When the database is missing it is created and the POST retried
        once. A concurrent creator winning the race (file_exists) is not an
        error: the database exists, which is what the retry needs.
        """
        doctype = doc.doctype
        db = make_db_name(prefix, doctype)
        try:
            return await self._http.request("POST", db, body=doc, out=UpdateResponse)
        except ServerError as e:
            if not e.is_no_database:
                raise

        logger.info(f"Database {db} missing, creating it")
        try:
            await self.create_db(prefix, doctype)
        except ServerError as e:
            if not e.is_file_exists:
                raise
            logger.debug(f"Database {db} created concurrently")

        return await self._http.request("POST", db, body=doc, out=UpdateResponse)

    async def create_doc(self, prefix: str, doc: Doc) -> None:
        """Persist a new document.

        Sets the document id before writing and its revision after. If the
        write fails the id is cleared again, so the same document can be
        retried.

        Args:
            prefix: Database name prefix
            doc: Document without an id

        Raises:
            ValidationError: If the value is not a Doc, already has an id
                or has no doctype
            ProtocolError: If CouchDB replies 2xx with ok=false
        """
        if not isinstance(doc, Doc):
            raise ValidationError(
                f"{type(doc).__name__} does not implement the Doc protocol"
            )
        if doc.id:
            raise ValidationError(
                "Can not create document with a defined ID", field_name="_id"
            )
        if not doc.doctype:
            raise ValidationError("Document has no doctype", field_name="doctype")

        doc.id = gen_doc_id(doc.doctype)
        try:
            res = await self._create_doc_or_db(prefix, doc)
            if not res.ok:
                raise ProtocolError(
                    "CouchDB replied with 2xx ok=false",
                    response=res.model_dump(),
                )
        except CouchDocError:
            doc.id = ""
            raise

        doc.rev = res.rev
