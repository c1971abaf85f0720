# schemas/newsletter.py
from pydantic import BaseModel, EmailStr
from typing import Optional


class NewsletterSchema(BaseModel):
    email: EmailStr
    source: Optional[str] = None   # homepage | checkout | creator
