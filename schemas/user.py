from pydantic import BaseModel, Field, validator
from typing import Any, Dict, Optional

class _PhoneBody(BaseModel):
    phone_number: Optional[str] = Field(None, alias="phoneNumber", max_length=20)

    @validator('phone_number')
    def strip_phone(cls, v):
        if v is None:
            return v
        return v.strip()

    class Config:
        populate_by_name = True

# Login Schema
class LoginRequest(_PhoneBody):
    user_type: Optional[str] = Field(None, alias="userType", description="owner or customer")

# Owner Registration Schema
class OwnerRegister(_PhoneBody):
    business_name: Optional[str] = Field(None, alias="businessName", max_length=255)
    owner_name: Optional[str] = Field(None, alias="ownerName", max_length=255)
    email: Optional[str] = Field(None, max_length=255)

# Customer Registration Schema
class CustomerRegister(_PhoneBody):
    full_name: Optional[str] = Field(None, alias="fullName", max_length=255)
    email: Optional[str] = Field(None, max_length=255)

# Customer Profile Update Schema
class ProfileUpdate(BaseModel):
    user_id: Optional[str] = Field(None, alias="userId")
    full_name: Optional[str] = Field(None, alias="fullName", max_length=255)
    email: Optional[str] = Field(None, max_length=255)

    class Config:
        populate_by_name = True

class PreferencesUpdate(BaseModel):
    user_id: Optional[str] = Field(None, alias="userId")
    preferences: Optional[Dict[str, Any]] = None

    class Config:
        populate_by_name = True
