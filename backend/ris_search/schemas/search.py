"""
Search Records: Pydantic Publish Schemas

The unit written to the search index is SearchRecord: one per chunk group
of a document. All records of a document share `entity`, `related`,
`totalPageCount` and `document`; only `pages` differs.

Wire format is camelCase (`model_dump(by_alias=True)`), which is what the
delete filter `document.sourceFilename:"<name>"` addresses.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _SearchModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class SearchPage(_SearchModel):
    page_number: int
    text:        str


class HierarchyEntity(_SearchModel):
    """Summary of the session, submission or agenda item owning the document."""
    title:       str
    subtitle:    str
    date:        int   = Field(..., description="Unix timestamp (seconds)")
    kind:        str
    name:        str   = Field(..., description="RIS numeric id, as string")
    encoded_key: str


class RelatedRecord(_SearchModel):
    """An agenda item sharing the owning node's numeric id, carried through as-is."""
    status:          str
    type:            str
    resolution_ref:  str
    date:            int
    session_id:      int
    decision_type:   str
    committee:       str
    agenda_item_id:  int
    subject:         str
    clerk:           str
    lead_department: str
    visibility:      str
    submission_id:   int | None = None


class SearchDocument(_SearchModel):
    """The attachment the OCR text came from."""
    title:           str
    encoded_key:     str
    kind:            str
    name:            str
    source_filename: str


class SearchRecord(_SearchModel):
    pages:            list[SearchPage] = Field(default_factory=list)
    total_page_count: int
    entity:           HierarchyEntity
    related:          list[RelatedRecord] = Field(default_factory=list)
    document:         SearchDocument

    @property
    def text(self) -> str:
        """All page texts of this record, for full-text indexing."""
        return "\n\n".join(p.text for p in self.pages)
