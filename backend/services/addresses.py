# backend/services/addresses.py
from typing import List

from fastapi import HTTPException
from sqlalchemy.orm import Session

from models.address import Address
from schemas.address import AddressCreate, AddressUpdate
from utils.updates import changed_fields

ADDRESS_FIELDS = (
    "full_name", "phone", "address_line1", "address_line2",
    "city", "state", "zip_code", "country",
)


class AddressManager:
    """Saved addresses of one account; keeps at most one default."""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def _query(self):
        return self.db.query(Address).filter(Address.user_id == self.user_id)

    def _clear_default(self, keep_id: int = None):
        query = self._query().filter(Address.is_default == True)  # noqa: E712
        if keep_id is not None:
            query = query.filter(Address.id != keep_id)
        query.update({Address.is_default: False}, synchronize_session=False)

    def list_addresses(self) -> List[Address]:
        return self._query().order_by(Address.is_default.desc(), Address.created_at.desc(), Address.id.desc()).all()

    def get_address(self, address_id: int) -> Address:
        address = self._query().filter(Address.id == address_id).first()
        if not address:
            raise HTTPException(status_code=404, detail="Address not found")
        return address

    def create_address(self, payload: AddressCreate) -> Address:
        data = payload.model_dump()
        # The first saved address becomes the default one
        if not self._query().first():
            data["is_default"] = True
        if data["is_default"]:
            self._clear_default()
        address = Address(user_id=self.user_id, **data)
        self.db.add(address)
        self.db.commit()
        self.db.refresh(address)
        return address

    def update_address(self, address_id: int, payload: AddressUpdate) -> Address:
        address = self.get_address(address_id)
        data = changed_fields(payload, nullable=("address_line2",))
        if data.get("is_default"):
            self._clear_default(keep_id=address.id)
        for key, value in data.items():
            setattr(address, key, value)
        self.db.commit()
        self.db.refresh(address)
        return address

    def set_default(self, address_id: int) -> Address:
        # Clear-then-set in one transaction
        address = self.get_address(address_id)
        self._clear_default(keep_id=address.id)
        address.is_default = True
        self.db.commit()
        self.db.refresh(address)
        return address

    def delete_address(self, address_id: int) -> None:
        address = self.get_address(address_id)
        self.db.delete(address)
        self.db.commit()
