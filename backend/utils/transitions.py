from enum import Enum
from typing import Mapping, Set, Type

from fastapi import HTTPException


def check_transition(
    enum_cls: Type[Enum],
    table: Mapping[Enum, Set[Enum]],
    current: str,
    requested: str,
    label: str = "status",
) -> Enum:
    """Validate a status change against an allowed-transitions table.

    Unknown values give 400, disallowed moves 409. Setting the current value
    again is accepted as a no-op.
    """
    try:
        target = enum_cls(requested)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise HTTPException(status_code=400, detail=f"Invalid {label} '{requested}'. Allowed: {allowed}")

    source = enum_cls(current)
    if target == source:
        return target
    if target not in table.get(source, set()):
        raise HTTPException(
            status_code=409,
            detail=f"Cannot change {label} from {source.value} to {target.value}",
        )
    return target
