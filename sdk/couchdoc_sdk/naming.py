"""
Database naming and document addressing.

Every (prefix, doctype) pair maps to exactly one CouchDB database. The
mapping is recomputed on every call, nothing is registered or cached.

Example:
    >>> make_db_name("cozy-", "io.cozy.files")
    'cozy-io-cozy-files'
    >>> doc_path("cozy-", "io.cozy.files", "42")
    'cozy-io-cozy-files/io.cozy.files%2F42'

Invariants:
    - The same (prefix, doctype) always yields the same database name
    - Database names contain no "." and no uppercase letters before escaping
    - Doctypes differing only by case or "."/"-" share a database
"""

from __future__ import annotations

import uuid
from urllib.parse import quote_plus


def make_db_name(prefix: str, doctype: str) -> str:
    """Compute the database name holding documents of a doctype.

    Args:
        prefix: Database name prefix (e.g. per-instance namespace)
        doctype: Document type

    Returns:
        URL path segment naming the database
    """
    dbname = (prefix + doctype).replace(".", "-").lower()
    return quote_plus(dbname, safe="")


def doc_path(prefix: str, doctype: str, doc_id: str) -> str:
    """Compute the resource path of a document.

    The document key repeats the doctype, so the "/" separating doctype
    and id is escaped as %2F.
    """
    return make_db_name(prefix, doctype) + "/" + quote_plus(doctype + "/" + doc_id, safe="")


def gen_doc_id(doctype: str) -> str:
    """Generate a new document id of the form ``<doctype>/<32 hex chars>``."""
    return doctype + "/" + uuid.uuid4().hex
