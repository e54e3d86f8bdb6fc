"""
Document contract for the couchdoc SDK.

Anything stored through CouchClient must satisfy the Doc protocol: it
reports its id, revision and doctype, accepts a new id and revision after
a write, and converts itself to and from the stored JSON object. Two
ready-made shapes are provided:

- JSONDoc: a plain dict where ``_id``, ``_rev`` and ``doctype`` are keys
- DocModel: a pydantic base class for typed documents

Example:
    >>> class File(DocModel):
    ...     doctype: ClassVar[str] = "io.cozy.files"
    ...     name: str
    >>>
    >>> doc = File(name="notes.txt")
    >>> await db.create_doc("cozy-", doc)
    >>> doc.id
    'io.cozy.files/3f1c...'

Invariants:
    - doctype never changes once a document exists
    - id and rev are empty strings until the first successful write
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, model_validator


@runtime_checkable
class Doc(Protocol):
    """Capabilities every storable document provides."""

    @property
    def id(self) -> str: ...

    @id.setter
    def id(self, value: str) -> None: ...

    @property
    def rev(self) -> str: ...

    @rev.setter
    def rev(self, value: str) -> None: ...

    @property
    def doctype(self) -> str: ...

    def to_json(self) -> Dict[str, Any]:
        """Return the JSON object to store."""
        ...

    def load_json(self, data: Dict[str, Any]) -> None:
        """Replace the content with a JSON object read from CouchDB."""
        ...


class JSONDoc(dict):
    """A simple JSON object usable as a document.

    The CouchDB reserved keys ``_id`` and ``_rev`` hold the identifier and
    revision, ``doctype`` holds the type tag. Missing keys read as "".
    """

    @property
    def id(self) -> str:
        return self.get("_id", "")

    @id.setter
    def id(self, value: str) -> None:
        self["_id"] = value

    @property
    def rev(self) -> str:
        return self.get("_rev", "")

    @rev.setter
    def rev(self, value: str) -> None:
        self["_rev"] = value

    @property
    def doctype(self) -> str:
        return self.get("doctype", "")

    def to_json(self) -> Dict[str, Any]:
        return dict(self)

    def load_json(self, data: Dict[str, Any]) -> None:
        self.clear()
        self.update(data)


class DocModel(BaseModel):
    """Base class for typed documents.

    Subclasses declare their doctype as a class variable and add their own
    fields. Unknown fields coming back from the server are preserved.

    Attributes:
        id: Document identifier (``_id`` on the wire)
        rev: Revision token (``_rev`` on the wire)
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    doctype: ClassVar[str] = ""

    id: str = Field(default="", alias="_id")
    rev: str = Field(default="", alias="_rev")

    @model_validator(mode="before")
    @classmethod
    def _strip_doctype(cls, data: Any) -> Any:
        # doctype is a class constant, the stored copy is informational only
        if isinstance(data, dict) and "doctype" in data:
            data = {k: v for k, v in data.items() if k != "doctype"}
        return data

    def to_json(self) -> Dict[str, Any]:
        """Serialize to the JSON object stored in CouchDB."""
        data = self.model_dump(mode="json", by_alias=True)
        if not data.get("_rev"):
            data.pop("_rev", None)
        data["doctype"] = self.doctype
        return data

    def load_json(self, data: Dict[str, Any]) -> None:
        """Validate a JSON object and assign its values to this document.

        Extra fields held before the load are dropped.
        """
        loaded = self.model_validate(data)
        if self.__pydantic_extra__ is not None:
            self.__pydantic_extra__.clear()
        for name, value in loaded:
            setattr(self, name, value)
