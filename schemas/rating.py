from typing import Optional
from pydantic import BaseModel, Field

class RatingSubmit(BaseModel):
    shop_id: Optional[str] = Field(None, alias="shopId")
    user_id: Optional[str] = Field(None, alias="userId")
    rating_value: Optional[int] = Field(None, alias="ratingValue", description="Rating from 1 to 5 stars")
    review_comment: Optional[str] = Field(None, alias="reviewComment", max_length=2000)

    class Config:
        populate_by_name = True
