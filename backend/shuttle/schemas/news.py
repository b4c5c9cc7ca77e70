from pydantic import BaseModel, Field


class NewsOut(BaseModel):
    content: str


class NewsUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
