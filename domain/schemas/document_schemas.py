"""Pydantic schemas for stored documents and relations.

Payloads are permissive: any extra attribute is accepted and echoed back.
Only the system attributes (``_key``, ``_id``, ``_rev``, ``_from``, ``_to``)
are declared and validated.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

KEY_CHARACTERS = r"A-Za-z0-9_\-:.@()+,=;$!*'%"
KEY_PATTERN = rf"^[{KEY_CHARACTERS}]{{1,254}}$"
HANDLE_PATTERN = rf"^[A-Za-z0-9_\-]{{1,256}}/[{KEY_CHARACTERS}]{{1,254}}$"


class Document(BaseModel):
    """A stored document as returned to clients."""

    model_config = ConfigDict(extra="allow")

    key: Optional[str] = Field(
        default=None, alias="_key", description="Unique key within the collection"
    )
    id: Optional[str] = Field(
        default=None, alias="_id", description="Document handle (collection/key)"
    )
    rev: Optional[str] = Field(
        default=None, alias="_rev", description="Revision of the stored document"
    )


class Relation(Document):
    """A stored relation: a document linking two endpoint documents."""

    from_: Optional[str] = Field(
        default=None, alias="_from", description="Handle of the source document"
    )
    to: Optional[str] = Field(
        default=None, alias="_to", description="Handle of the target document"
    )


class NewDocument(BaseModel):
    """Payload accepted when creating a document."""

    model_config = ConfigDict(extra="allow")

    key: Optional[str] = Field(
        default=None,
        alias="_key",
        pattern=KEY_PATTERN,
        description="Optional explicit key; generated by the store when omitted",
    )


class NewRelation(NewDocument):
    """Payload accepted when creating a relation."""

    from_: str = Field(
        ..., alias="_from", pattern=HANDLE_PATTERN, description="Source handle"
    )
    to: str = Field(..., alias="_to", pattern=HANDLE_PATTERN, description="Target handle")


class DocumentChanges(BaseModel):
    """Payload of a replace or update.

    When ``_rev`` is present the write only applies to that revision.
    """

    model_config = ConfigDict(extra="allow")

    rev: Optional[str] = Field(
        default=None, alias="_rev", description="Expected current revision"
    )
