from pydantic import BaseModel, Field
from typing import Literal, Union


class UploadProgress(BaseModel):
    kind: Literal["progress"] = "progress"
    percentComplete: int = Field(..., ge=0, le=100)


class UploadComplete(BaseModel):
    kind: Literal["complete"] = "complete"
    publicUrl: str
    path: str


class UploadFailed(BaseModel):
    kind: Literal["failed"] = "failed"
    reason: str


UploadEvent = Union[UploadProgress, UploadComplete, UploadFailed]


class ImageInfo(BaseModel):
    mimeType: str
    width: int
    height: int
