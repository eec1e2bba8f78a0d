from pydantic import BaseModel
from typing import Any, List, Optional


class APIResponse(BaseModel):
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    message: Optional[str] = None
    details: Optional[str] = None
    warnings: Optional[List[str]] = None

    def to_content(self) -> dict:
        return self.model_dump(exclude_none=True)


def error_content(error: str, details: Optional[str] = None) -> dict:
    return APIResponse(success=False, error=error, details=details).to_content()
