"""Pydantic models for notes, their content trees and backlink records."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag

from .config import NOTE_LINK_TYPE

# A node's position: child indices descending from the note's top-level nodes.
Path = tuple[int, ...]


class TextNode(BaseModel):
    """A leaf holding raw text. Formatting marks (bold, code, ...) are kept as extras."""

    model_config = ConfigDict(frozen=True, extra="allow")

    text: str


class ElementNode(BaseModel):
    """A tagged element with per-tag fields (kept as extras) and ordered children."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: str
    children: tuple["Node", ...] = ()


class LinkNode(ElementNode):
    """An element referencing another note by id.

    note_title is a denormalized copy of the target's title. When
    is_text_title is set, the link's visible text must equal that title.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    type: Literal["link"] = "link"
    note_id: str = Field(alias="noteId")
    note_title: str = Field(default="", alias="noteTitle")
    is_text_title: bool = Field(default=False, alias="isTextTitle")


def _node_kind(value: Any) -> str:
    """Discriminate raw dicts and model instances into text/link/element."""
    if isinstance(value, TextNode):
        return "text"
    if isinstance(value, LinkNode):
        return "link"
    if isinstance(value, ElementNode):
        return "element"

    node_type = value.get("type") if isinstance(value, dict) else None
    if node_type is None:
        return "text"
    if node_type == NOTE_LINK_TYPE:
        return "link"
    return "element"


Node = Annotated[
    Union[
        Annotated[TextNode, Tag("text")],
        Annotated[LinkNode, Tag("link")],
        Annotated[ElementNode, Tag("element")],
    ],
    Discriminator(_node_kind),
]

ElementNode.model_rebuild()
LinkNode.model_rebuild()


class Document(BaseModel):
    """A note as supplied by the document store."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str = ""
    content: tuple[Node, ...] = ()
    owner_id: str | None = Field(default=None, alias="user_id")


class Match(BaseModel):
    """One located link node: where it is and the text around it."""

    model_config = ConfigDict(frozen=True)

    context: str  # Flattened text of the link's parent element
    path: Path  # Path to the link node within the note content


class Backlink(BaseModel):
    """All matches in one note that point at the searched target."""

    model_config = ConfigDict(frozen=True)

    id: str  # Id of the note containing the links
    title: str  # Its title as last known
    matches: tuple[Match, ...] = ()


class PatchedDocument(BaseModel):
    """A rewritten note, ready to be upserted by the store."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    owner_id: str | None = Field(default=None, alias="user_id")
    content: tuple[Node, ...] = ()


class RenameResult(BaseModel):
    """Summary of a backlink update run."""

    note_id: str  # The renamed note
    new_title: str
    updated: list[str] = Field(default_factory=list)  # Ids of notes written back
    skipped: list[str] = Field(default_factory=list)  # Backlink ids with no content found
    matches: int = 0  # Matched link nodes across all written notes
    dry_run: bool = False
