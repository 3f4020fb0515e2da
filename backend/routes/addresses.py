# backend/routes/addresses.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas.address import AddressCreate, AddressUpdate, AddressOut
from schemas.user import IdentityUser
from services.addresses import AddressManager
from utils.security import get_current_user

router = APIRouter(prefix="/api/addresses", tags=["Addresses"])

def _manager(db: Session = Depends(get_db), current_user: IdentityUser = Depends(get_current_user)) -> AddressManager:
    return AddressManager(db, current_user.id)

@router.get("", response_model=List[AddressOut])
def list_addresses(addresses: AddressManager = Depends(_manager)):
    return addresses.list_addresses()

@router.post("", response_model=AddressOut, status_code=201)
def create_address(payload: AddressCreate, addresses: AddressManager = Depends(_manager)):
    return addresses.create_address(payload)

@router.patch("/{address_id}", response_model=AddressOut)
def update_address(address_id: int, payload: AddressUpdate, addresses: AddressManager = Depends(_manager)):
    return addresses.update_address(address_id, payload)

# Make this the only default address of the user
@router.post("/{address_id}/default", response_model=AddressOut)
def set_default_address(address_id: int, addresses: AddressManager = Depends(_manager)):
    return addresses.set_default(address_id)

@router.delete("/{address_id}")
def delete_address(address_id: int, addresses: AddressManager = Depends(_manager)):
    addresses.delete_address(address_id)
    return {"success": True}
