from pydantic import BaseModel, Field
from ..common.base_document_spec import BaseDocument


class CommentCreate(BaseModel):
	author: str = Field(..., description="Free-text display name of the visitor")
	content: str = Field(..., description="Comment body")


class Comment(BaseDocument):
	postId: str = Field(..., description="Owning post; also the partition key")
	author: str
	content: str
	hidden: bool = Field(False, description="Hidden comments are only returned to admins")
