"""Pydantic models for upload service responses.

Responses are validated at the boundary so a change in the service's JSON
shape fails loudly instead of producing an empty link.
"""
from typing import Optional

from pydantic import BaseModel, field_validator


class ImgurImage(BaseModel):
    id: str
    link: str
    deletehash: Optional[str] = None
    type: Optional[str] = None

    @field_validator("link")
    @classmethod
    def link_is_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("link is not a URL")
        return v


class ImgurResponse(BaseModel):
    data: ImgurImage
    success: bool
    status: int


class FiledropCreateResponse(BaseModel):
    gfyname: str
    secret: Optional[str] = None
    isOk: bool = True

    @field_validator("gfyname")
    @classmethod
    def gfyname_nonempty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("gfyname cannot be empty")
        return v.strip()
