# backend/utils/references.py
import secrets
import time
import uuid
from typing import Optional

BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def to_base36(n: int) -> str:
    if n < 0:
        raise ValueError("negative numbers have no base36 form here")
    if n == 0:
        return "0"
    digits = []
    while n:
        n, r = divmod(n, 36)
        digits.append(BASE36[r])
    return "".join(reversed(digits))


def random_base36(length: int) -> str:
    return "".join(secrets.choice(BASE36) for _ in range(length))


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_order_number(now_ms: Optional[int] = None) -> str:
    """ORD-<base36 ms timestamp>-<4 random base36 chars>, upper case."""
    ts = _now_ms() if now_ms is None else now_ms
    return f"ORD-{to_base36(ts)}-{random_base36(4)}"


def generate_session_id() -> str:
    """Anonymous visitor id, time-salted to reduce collisions."""
    return f"sess_{to_base36(_now_ms()).lower()}_{random_base36(12).lower()}"


def generate_guest_session_id() -> str:
    # Minted per guest order, distinct from the cart's visitor id
    return f"guest_{to_base36(_now_ms()).lower()}_{random_base36(9).lower()}"


def generate_booking_reference() -> str:
    return f"BBQ-{uuid.uuid4().hex[:10].upper()}"
