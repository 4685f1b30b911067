from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from catalogue_builder.models import CatalogueItem, RenderFilter


class GeneratePdfRequest(BaseModel):
    # Left loose so bad items/filters surface as ValidationFailed (400) from the pipeline.
    items: Any = None
    filter: Optional[str] = RenderFilter.BOTH.value


class EmailRequest(BaseModel):
    email: EmailStr
    filter: RenderFilter
    order: Literal["asc", "desc"] = "asc"


class EmailAck(BaseModel):
    success: bool
    message: str


class CatalogueItemOut(BaseModel):
    id: str
    model_number: int
    label: str
    sizes: List[str] = Field(default_factory=list)
    weight_adult: Optional[float] = None
    weight_kids: Optional[float] = None
    image_url: Optional[str] = None

    @classmethod
    def from_item(cls, item: CatalogueItem, image_url: Optional[str] = None) -> "CatalogueItemOut":
        return cls(
            id=item.id,
            model_number=item.model_number,
            label=item.label,
            sizes=sorted(tag.value for tag in item.sizes),
            weight_adult=item.weight_adult,
            weight_kids=item.weight_kids,
            image_url=image_url,
        )


class CatalogueList(BaseModel):
    filter: RenderFilter
    order: str
    total: int
    items: List[CatalogueItemOut]
