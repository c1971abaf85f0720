# schemas/postcards.py
from pydantic import BaseModel
from typing import Optional

from odesa.models.postcard import PostcardContent


class PostcardCreateSchema(PostcardContent):
    # only used when the request carries no token
    userId: Optional[str] = None


class VisibilitySchema(BaseModel):
    isPublic: bool


class PostcardActionSchema(BaseModel):
    # attribution for anonymous callers; a token wins over this
    userId: Optional[str] = None
    platform: Optional[str] = None   # instagram | facebook | twitter | email
