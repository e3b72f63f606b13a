from pydantic import BaseModel, Field, StrictFloat, StrictInt
from typing import List, Optional, Union

Coordinate = Union[StrictInt, StrictFloat]

class LocationIn(BaseModel):
    latitude: Optional[Coordinate] = None
    longitude: Optional[Coordinate] = None
    formatted_address: Optional[str] = Field(None, alias="formattedAddress", max_length=500)
    street_address: Optional[str] = Field(None, alias="streetAddress", max_length=255)
    locality: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, alias="postalCode", max_length=20)
    plus_code: Optional[str] = Field(None, alias="plusCode", max_length=50)

    class Config:
        populate_by_name = True

class PhotoIn(BaseModel):
    uri: str = Field(..., max_length=1000)

# Photos arrive either as {uri} objects from the picker or as plain URLs
PhotoItem = Union[PhotoIn, str]

# Shop Profile Creation Schema
class ShopProfileCreate(BaseModel):
    owner_id: Optional[str] = Field(None, alias="ownerId")
    shop_name: Optional[str] = Field(None, alias="shopName", max_length=255)
    description: Optional[str] = None
    categories: Optional[List[str]] = None
    location: Optional[LocationIn] = None
    visibility_radius: Optional[float] = Field(None, alias="visibilityRadius", gt=0)
    photos: Optional[List[PhotoItem]] = None

    class Config:
        populate_by_name = True

# Shop Profile Update Schema
class ShopProfileUpdate(BaseModel):
    shop_id: Optional[str] = Field(None, alias="shopId")
    shop_name: Optional[str] = Field(None, alias="shopName", max_length=255)
    description: Optional[str] = None
    categories: Optional[List[str]] = None
    location: Optional[LocationIn] = None
    visibility_radius: Optional[float] = Field(None, alias="visibilityRadius", gt=0)
    is_visible: Optional[bool] = Field(None, alias="isVisible")
    is_online: Optional[bool] = Field(None, alias="isOnline")
    photos: Optional[List[PhotoItem]] = None

    class Config:
        populate_by_name = True
