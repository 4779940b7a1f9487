"""Canonical document model: block variants, documents, and TOC entries"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, ValidationError


DEFAULT_VERSION = "2.31.0"

BLOCK_TYPES = ("header", "paragraph", "code", "list", "image", "callout")
CALLOUT_TYPES = ("note", "info", "warning")
LIST_STYLES = ("ordered", "unordered")


class HeaderData(BaseModel):
    text: str = Field(min_length=1)
    level: int = Field(default=2, ge=1, le=6)


class ParagraphData(BaseModel):
    text: str = Field(min_length=1)  # limited inline HTML (b/strong/i/em/u/br)


class CodeData(BaseModel):
    code: str = ""
    language: Optional[str] = None


class ListData(BaseModel):
    style: Literal["ordered", "unordered"] = "unordered"
    items: list[str] = Field(min_length=1)


class ImageFile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    url: str = ""
    external_url: Optional[str] = Field(default=None, alias="externalUrl")


class ImageData(BaseModel):
    """Uploaded image reference; editor flags such as withBorder ride along as extras."""
    model_config = ConfigDict(extra="allow")
    file: Optional[ImageFile] = None
    url: Optional[str] = None       # legacy, pre-upload documents
    caption: str = ""


class CalloutData(BaseModel):
    model_config = ConfigDict(extra="allow")
    text: str = ""
    type: Literal["note", "info", "warning"] = "note"


class _BlockBase(BaseModel):
    id: Optional[str] = None        # editor-assigned block id, opaque

    def to_dict(self) -> dict[str, Any]:
        """Persisted JSON shape of this block."""
        return self.model_dump(by_alias=True, exclude_none=True)


class HeaderBlock(_BlockBase):
    type: Literal["header"] = "header"
    data: HeaderData


class ParagraphBlock(_BlockBase):
    type: Literal["paragraph"] = "paragraph"
    data: ParagraphData


class CodeBlock(_BlockBase):
    type: Literal["code"] = "code"
    data: CodeData = Field(default_factory=CodeData)


class ListBlock(_BlockBase):
    type: Literal["list"] = "list"
    data: ListData


class ImageBlock(_BlockBase):
    type: Literal["image"] = "image"
    data: ImageData = Field(default_factory=ImageData)


class CalloutBlock(_BlockBase):
    type: Literal["callout"] = "callout"
    data: CalloutData = Field(default_factory=CalloutData)


class UnknownBlock(_BlockBase):
    """A block whose type the renderer does not recognize; payload kept verbatim."""
    type: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type, "data": self.data}
        if self.id is not None:
            out = {"id": self.id, **out}
        return out


def _block_tag(value: Any) -> str:
    """Route known type names to their variant and everything else to 'unknown'."""
    if isinstance(value, dict):
        block_type = value.get("type")
    else:
        block_type = getattr(value, "type", None)
    return block_type if block_type in BLOCK_TYPES else "unknown"


Block = Annotated[
    Union[
        Annotated[HeaderBlock, Tag("header")],
        Annotated[ParagraphBlock, Tag("paragraph")],
        Annotated[CodeBlock, Tag("code")],
        Annotated[ListBlock, Tag("list")],
        Annotated[ImageBlock, Tag("image")],
        Annotated[CalloutBlock, Tag("callout")],
        Annotated[UnknownBlock, Tag("unknown")],
    ],
    Discriminator(_block_tag),
]

BLOCK_MODELS: dict[str, type[_BlockBase]] = {
    "header":    HeaderBlock,
    "paragraph": ParagraphBlock,
    "code":      CodeBlock,
    "list":      ListBlock,
    "image":     ImageBlock,
    "callout":   CalloutBlock,
}


class Document(BaseModel):
    """Ordered block sequence plus editor format metadata.

    Block order is the reading order; a block's index in `blocks` is the only
    positional reference used for anchors (`section-{index}`).
    """
    time: int                       # epoch milliseconds
    version: str = DEFAULT_VERSION
    blocks: list[Block] = Field(default_factory=list)

    def to_content(self) -> dict[str, Any]:
        """Return the persisted `{time, version, blocks}` JSON shape."""
        return {
            "time": self.time,
            "version": self.version,
            "blocks": [b.to_dict() for b in self.blocks],
        }


class TocEntry(BaseModel):
    """One header in the table of contents; nesting is visual only (see `level`)."""
    anchor_id: str
    text: str
    level: int
    source_index: int


def is_block(value: Any, block_type: str) -> bool:
    """Return True if value is a well-formed block of the given variant.

    Accepts model instances or raw mappings in the persisted shape.
    """
    model = BLOCK_MODELS.get(block_type)
    if model is None:
        return False
    if isinstance(value, model):
        return True
    if not isinstance(value, dict) or value.get("type") != block_type:
        return False
    try:
        model.model_validate(value)
    except ValidationError:
        return False
    return True
