from pydantic import BaseModel, ConfigDict
from typing import Optional

# Shared address fields
class AddressBase(BaseModel):
    label: str = "Home"
    full_name: str
    phone: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    zip_code: str
    country: str = "United States"

class AddressCreate(AddressBase):
    is_default: bool = False

# Partial update, all fields optional
class AddressUpdate(BaseModel):
    label: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    is_default: Optional[bool] = None

class AddressOut(AddressBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    is_default: bool
