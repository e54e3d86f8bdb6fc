#!/usr/bin/env python3
"""
couchdoc Demo - Shows document creation and retrieval.

Needs a CouchDB reachable at COUCHDOC_COUCHDB_URL (default
http://localhost:5984/) that accepts database creation.
"""

import asyncio
import logging
from typing import ClassVar

from sdk.couchdoc_sdk import CouchClient, DocModel, JSONDoc, ServerError, make_db_name

PREFIX = "demo-"


class Contact(DocModel):
    doctype: ClassVar[str] = "io.cozy.contacts"

    name: str
    email: str


async def main():
    logging.basicConfig(level=logging.INFO)

    print("=" * 60)
    print("couchdoc Demo - Insertions and Retrievals")
    print("=" * 60)

    async with CouchClient.from_settings() as db:
        info = await db.health()
        print(f"[Setup] CouchDB {info.get('version', '?')} at {db.couch_url}")

        # 1. Untyped documents
        print("\n[Step 1] Creating files (database created on first write)...")
        files = [
            JSONDoc({"doctype": "io.cozy.files", "name": "notes.txt", "size": 120}),
            JSONDoc({"doctype": "io.cozy.files", "name": "photo.jpg", "size": 40960}),
        ]
        for doc in files:
            await db.create_doc(PREFIX, doc)
            print(f"  - {doc['name']}: id={doc.id} rev={doc.rev}")
        print(f"  Database: {make_db_name(PREFIX, 'io.cozy.files')}")

        # 2. Typed documents
        print("\n[Step 2] Creating contacts...")
        alice = Contact(name="Alice Smith", email="alice@example.com")
        await db.create_doc(PREFIX, alice)
        print(f"  - {alice.name}: id={alice.id}")

        # 3. Retrieval
        print("\n[Step 3] Reading back...")
        fetched = await db.get_doc(PREFIX, "io.cozy.files", files[0].id)
        print(f"  - {fetched['name']} ({fetched['size']} bytes) rev={fetched.rev}")
        contact = await db.get_doc(PREFIX, Contact.doctype, alice.id, out=Contact(name="", email=""))
        print(f"  - {contact.name} <{contact.email}>")

        # 4. Unknown doctype
        print("\n[Step 4] Reading a doctype that has no database...")
        try:
            await db.get_doc(PREFIX, "io.cozy.unknown", "x")
        except ServerError as e:
            print(f"  - {e.status_code} reason={e.reason}")

        # Cleanup
        await db.delete_db(PREFIX, "io.cozy.files")
        await db.delete_db(PREFIX, Contact.doctype)

    print()
    print("=" * 60)
    print("Demo Complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
