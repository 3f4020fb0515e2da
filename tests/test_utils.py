import re
from decimal import Decimal

import pytest
from fastapi import HTTPException

from models.booking import BOOKING_TRANSITIONS, BookingStatus
from models.order import ORDER_TRANSITIONS, OrderStatus
from utils.money import format_price, percent_of, to_amount, to_cents
from utils.references import (
    generate_booking_reference, generate_guest_session_id, generate_order_number,
    generate_session_id, to_base36,
)
from utils.session import Scope
from utils.transitions import check_transition

ORDER_NUMBER = re.compile(r"^ORD-[0-9A-Z]+-[0-9A-Z]{4}$")


def test_to_cents_rounds_half_up():
    assert to_cents("45.00") == 4500
    assert to_cents(Decimal("10.005")) == 1001
    assert to_cents(0) == 0


def test_format_price():
    assert format_price(2550) == "$25.50"
    assert format_price(123456) == "$1,234.56"
    assert format_price(999, "EUR") == "€9.99"
    assert format_price(100, "CHF") == "CHF 1.00"


def test_to_amount():
    assert to_amount(4500) == 45.0
    assert to_amount(2550) == 25.5


def test_percent_of():
    assert percent_of(15000, 30) == 4500
    # 2999.7 rounds up
    assert percent_of(9999, 30) == 3000


def test_base36():
    assert to_base36(0) == "0"
    assert to_base36(35) == "Z"
    assert to_base36(36) == "10"


def test_order_number_format():
    number = generate_order_number(now_ms=1700000000000)
    assert ORDER_NUMBER.match(number)
    assert number.startswith(f"ORD-{to_base36(1700000000000)}-")
    assert ORDER_NUMBER.match(generate_order_number())


def test_visitor_and_booking_references():
    assert generate_session_id().startswith("sess_")
    assert generate_guest_session_id().startswith("guest_")
    assert re.match(r"^BBQ-[0-9A-F]{10}$", generate_booking_reference())
    assert generate_session_id() != generate_session_id()


def test_scope_requires_exactly_one_owner():
    with pytest.raises(ValueError):
        Scope()
    with pytest.raises(ValueError):
        Scope(user_id="u1", session_id="sess_1")
    assert Scope(session_id="sess_1").is_anonymous
    assert not Scope(user_id="u1").is_anonymous
    assert Scope(user_id="u1").columns() == {"user_id": "u1", "session_id": None}


class TestCheckTransition:
    def test_allowed_move(self):
        assert check_transition(OrderStatus, ORDER_TRANSITIONS, "pending", "processing") is OrderStatus.PROCESSING

    def test_same_status_is_noop(self):
        assert check_transition(OrderStatus, ORDER_TRANSITIONS, "shipped", "shipped") is OrderStatus.SHIPPED

    def test_skipping_ahead_conflicts(self):
        with pytest.raises(HTTPException) as exc:
            check_transition(OrderStatus, ORDER_TRANSITIONS, "pending", "delivered")
        assert exc.value.status_code == 409

    def test_terminal_state_conflicts(self):
        with pytest.raises(HTTPException) as exc:
            check_transition(OrderStatus, ORDER_TRANSITIONS, "cancelled", "pending")
        assert exc.value.status_code == 409

    def test_unknown_value_is_bad_request(self):
        with pytest.raises(HTTPException) as exc:
            check_transition(OrderStatus, ORDER_TRANSITIONS, "pending", "lost")
        assert exc.value.status_code == 400
        assert "Allowed" in exc.value.detail

    def test_active_rental_can_only_complete(self):
        assert check_transition(BookingStatus, BOOKING_TRANSITIONS, "active", "completed") is BookingStatus.COMPLETED
        with pytest.raises(HTTPException) as exc:
            check_transition(BookingStatus, BOOKING_TRANSITIONS, "active", "cancelled")
        assert exc.value.status_code == 409
