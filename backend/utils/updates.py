from typing import Iterable

from fastapi import HTTPException
from pydantic import BaseModel


def changed_fields(payload: BaseModel, nullable: Iterable[str] = (), exclude: Iterable[str] = ("id",)) -> dict:
    """Fields explicitly sent in a partial update.

    An explicit null is accepted only for columns that may be empty; for any
    other field it is a 400 like every other validation error.
    """
    data = payload.model_dump(exclude_unset=True, exclude=set(exclude))
    nullable = set(nullable)
    rejected = sorted(key for key, value in data.items() if value is None and key not in nullable)
    if rejected:
        raise HTTPException(status_code=400, detail=f"Fields cannot be null: {', '.join(rejected)}")
    return data
