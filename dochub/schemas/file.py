from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProcessedFile(CamelModel):
    """One output of ``POST /api/process``; bytes travel as a plain integer list."""

    id: str
    name: str
    original_name: str
    size: int
    type: str
    data: List[int]
    processed_at: str
    tool_used: str


class StoredFileOut(CamelModel):
    """A file written to the uploads directory by ``POST /api/upload``."""

    id: str
    name: str
    size: int
    type: str
    uploaded_at: str
    path: str
    url: str
