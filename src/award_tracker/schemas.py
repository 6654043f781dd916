from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator


# --- Record store entities -------------------------------------------------


class Requirement(BaseModel):
    """Canonical requirement as returned to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    award_id: str = Field(default="", alias="awardId")
    text: str = ""
    done: bool = False


class Award(BaseModel):
    """Canonical award as returned to clients. `requirements` is derived, never persisted on the record."""

    id: str
    name: str = ""
    url: str = ""
    notes: str = ""
    deadline: str = ""
    status: str = "researching"
    requirements: List[Requirement] = Field(default_factory=list)


class AwardCreate(BaseModel):
    name: str = Field(..., min_length=1)
    url: Optional[str] = None
    notes: Optional[str] = None
    deadline: Optional[str] = None
    status: Optional[str] = None


class AwardUpdate(BaseModel):
    """
    Sparse award update. Only keys present in the request body are written;
    use `changes()` rather than `model_dump()`.
    """

    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    url: Optional[str] = None
    notes: Optional[str] = None
    deadline: Optional[str] = None
    status: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude={"id"})


class RequirementCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    award_id: str = Field(..., alias="awardId", min_length=1)
    text: str = Field(..., min_length=1)
    done: Optional[bool] = None


class RequirementUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    text: Optional[str] = None
    done: Optional[bool] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude={"id"})


class DeleteRequest(BaseModel):
    id: str = Field(..., min_length=1)


# --- Inference gateway requests --------------------------------------------


class DiscoverRequest(BaseModel):
    """Find new awards matching a free-text query."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["discover"]
    query: str = Field(..., min_length=1)
    existing: Union[str, List[str]] = Field(
        default="",
        description="Award names already tracked; a comma-separated string or a list.",
    )

    @field_validator("existing", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    def existing_names(self) -> str:
        if isinstance(self.existing, list):
            return ", ".join(str(x).strip() for x in self.existing if str(x).strip())
        return self.existing.strip()


class AnalyzeRequest(BaseModel):
    """List the submission requirements for one award."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["analyze"]
    award_name: str = Field(..., alias="awardName", min_length=1)
    award_url: Optional[str] = Field(default=None, alias="awardUrl")


class ManuscriptRequest(BaseModel):
    """
    Summarize a manuscript and match it to awards.

    Either `manuscriptText` (extracted client-side, e.g. from DOCX) or
    `manuscriptBase64` (raw document bytes, e.g. a PDF) must be present.
    When both are sent the document wins.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["manuscript"]
    manuscript_text: Optional[str] = Field(default=None, alias="manuscriptText")
    manuscript_base64: Optional[str] = Field(default=None, alias="manuscriptBase64")
    file_name: Optional[str] = Field(default=None, alias="fileName")

    @model_validator(mode="after")
    def _require_content(self) -> "ManuscriptRequest":
        if not (self.manuscript_base64 or "").strip() and not (self.manuscript_text or "").strip():
            raise ValueError("manuscriptText or manuscriptBase64 is required")
        return self

    @property
    def has_document(self) -> bool:
        return bool((self.manuscript_base64 or "").strip())


AIRequest = Annotated[
    Union[DiscoverRequest, AnalyzeRequest, ManuscriptRequest],
    Field(discriminator="type"),
]

AI_REQUEST_TYPES = ("discover", "analyze", "manuscript")

ai_request_adapter: TypeAdapter[Any] = TypeAdapter(AIRequest)


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class AIResponse(BaseModel):
    content: List[TextContent]
