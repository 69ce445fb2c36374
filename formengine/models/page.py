"""Page and form schema models.

Pages are an ordered, presentational grouping of fields. The order of pages
drives navigation; field identifiers are form-wide.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from formengine.models.fields import FieldDefinition, is_fillable, parse_field


class Page(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    title: str = ""
    fields: List[FieldDefinition] = Field(default_factory=list)

    @field_validator("fields", mode="before")
    @classmethod
    def parse_field_definitions(cls, v: Any) -> List[Any]:
        if v is None:
            return []
        if not isinstance(v, (list, tuple)):
            raise ValueError("page.fields must be a list")
        return [parse_field(item) for item in v]

    def fillable_fields(self) -> List[FieldDefinition]:
        return [f for f in self.fields if is_fillable(f)]

    def field_ids(self) -> List[str]:
        return [f.id for f in self.fields]


class FormSchema(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None
    title: str = ""
    pages: List[Page] = Field(default_factory=list)

    def page_index(self, page_id: str) -> Optional[int]:
        for index, page in enumerate(self.pages):
            if page.id == page_id:
                return index
        return None

    def iter_fields(self) -> Iterator[tuple[Page, FieldDefinition]]:
        for page in self.pages:
            for f in page.fields:
                yield page, f

    def field_kinds(self) -> Dict[str, str]:
        """Map every fillable field id to its kind."""
        return {f.id: f.kind for _page, f in self.iter_fields() if is_fillable(f)}


__all__ = ["Page", "FormSchema"]
