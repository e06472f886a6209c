from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class FetchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    final_url: str
    html: str = ""
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return bool(self.html) and self.error is None


class DomMeta(BaseModel):
    """Fields read from the live DOM after client-side rendering."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    description: str = ""
    image: str = ""


class RenderedDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    html: str
    dom: DomMeta = DomMeta()


class MetadataResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    title: str = ""
    description: str = ""
    url: str = ""
    site_name: str = ""
    image: str = ""
    icon: str = ""
    keywords: str = ""
    error: Optional[str] = None

    @classmethod
    def failed(cls, reason: str) -> "MetadataResult":
        return cls(success=False, error=reason)


class ErrorResponse(BaseModel):
    success: bool = False
    url: Optional[str] = None
    error: str
    er_message: Optional[str] = Field(default=None, serialization_alias="erMessage")
    usage: str
