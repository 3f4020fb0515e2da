from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReviewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_name: str
    customer_title: Optional[str] = None
    review_text: str
    rating: int
    is_active: bool
    display_order: int
    created_at: Optional[datetime] = None


class ReviewCreate(BaseModel):
    customer_name: Optional[str] = None
    customer_title: Optional[str] = None
    review_text: Optional[str] = None
    rating: int = Field(5, ge=1, le=5)
    is_active: bool = True
    display_order: int = 0


class ReviewUpdate(BaseModel):
    id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_title: Optional[str] = None
    review_text: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    is_active: Optional[bool] = None
    display_order: Optional[int] = None
