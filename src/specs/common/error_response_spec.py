from pydantic import BaseModel, Field
from typing import Optional, Any, Literal

class Notice(BaseModel):
    """Transient user notification (toast) attached to a response."""
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"

class ErrorResponse(BaseModel):
    success: Literal[False] = False
    message: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Application-specific error code")
    details: Optional[Any] = Field(None, description="Additional error details")
    notice: Optional[Notice] = None
