from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import event

from payfam.core.exceptions import NotFoundError, ValidationError
from payfam.models.member import Member
from payfam.models.message import MessageLog
from payfam.models.payment import MonthlyDue, PaymentTransaction
from payfam.services.ledger import record_payment
from payfam.services.member import (
    create_member,
    delete_member,
    list_members,
    toggle_member_active,
    update_member,
)
from payfam.services.messaging import create_payment_receipt
import uuid


def test_create_member_defaults(db):
    member = create_member(db, name="  Sara Malik ", phone_number="+923021234567", monthly_fee="800")

    assert member.name == "Sara Malik"
    assert member.monthly_fee == Decimal("800")
    assert member.active is True
    assert member.membership_type == "regular"
    assert member.joining_date == date.today()


@pytest.mark.parametrize("fields", [
    {"name": "A", "phone_number": "+923001234567", "monthly_fee": 100},
    {"name": "Ahmed", "phone_number": "03001234567", "monthly_fee": 100},
    {"name": "Ahmed", "phone_number": "+923001234567", "monthly_fee": -1},
    {"name": "Ahmed", "phone_number": "+923001234567", "monthly_fee": None},
    {"name": "Ahmed", "phone_number": "+923001234567", "monthly_fee": 100, "alternate_phone": "12345"},
    {"name": "Ahmed", "phone_number": "+923001234567", "monthly_fee": 100, "address": "x" * 501},
    {"name": "Ahmed", "phone_number": "+923001234567", "monthly_fee": 100, "shoe_size": 42},
])
def test_create_member_validation(db, fields):
    with pytest.raises(ValidationError):
        create_member(db, **fields)
    assert db.query(Member).count() == 0


def test_update_member_only_touches_given_fields(db, member):
    updated = update_member(db, member.id, father_name="Imran Khan", monthly_fee=Decimal("6000"))

    assert updated.father_name == "Imran Khan"
    assert updated.monthly_fee == Decimal("6000")
    assert updated.name == "Ahmed Khan"


def test_update_member_rejects_unknown_user(db, member):
    with pytest.raises(NotFoundError):
        update_member(db, member.id, user_id=uuid.uuid4())


def test_fee_change_keeps_existing_dues(db, member):
    record_payment(db, member.id, Decimal("100"), date(2025, 1, 2), today=date(2025, 1, 2))
    update_member(db, member.id, monthly_fee=Decimal("9000"))

    due = db.query(MonthlyDue).one()
    assert due.amount_due == Decimal("5000")


def test_toggle_member_active(db, member):
    assert toggle_member_active(db, member.id).active is False
    assert toggle_member_active(db, member.id).active is True


def test_list_members_filters(db, make_member):
    make_member(name="Ahmed Khan", phone_number="+923001234567")
    inactive = make_member(name="Bilal Hussain", phone_number="+923011234567")
    toggle_member_active(db, inactive.id)

    assert [m.name for m in list_members(db)] == ["Ahmed Khan", "Bilal Hussain"]
    assert [m.name for m in list_members(db, search="bilal")] == ["Bilal Hussain"]
    assert [m.name for m in list_members(db, search="300123")] == ["Ahmed Khan"]
    assert [m.name for m in list_members(db, active=True)] == ["Ahmed Khan"]


def _seed_ledger(db, member):
    record_payment(db, member.id, Decimal("2000"), date(2025, 1, 3), today=date(2025, 1, 3))
    tx = record_payment(db, member.id, Decimal("5000"), date(2025, 2, 3), today=date(2025, 2, 3))
    create_payment_receipt(db, tx)


def test_delete_member_removes_dependents(db, make_member):
    member = make_member()
    other = make_member(name="Bilal Hussain", phone_number="+923011234567")
    _seed_ledger(db, member)
    _seed_ledger(db, other)
    member_id = member.id

    removed = delete_member(db, member_id)

    assert removed == {"transactions": 2, "monthly_dues": 2, "message_logs": 1}
    assert db.query(Member).filter(Member.id == member_id).count() == 0
    assert db.query(PaymentTransaction).filter(PaymentTransaction.member_id == member_id).count() == 0
    assert db.query(MonthlyDue).filter(MonthlyDue.member_id == member_id).count() == 0
    assert db.query(MessageLog).filter(MessageLog.member_id == member_id).count() == 0
    assert db.query(MonthlyDue).filter(MonthlyDue.member_id == other.id).count() == 2


def test_delete_member_is_all_or_nothing(db, member):
    _seed_ledger(db, member)
    member_id = member.id

    def fail_member_delete(orm_execute_state):
        mapper = orm_execute_state.bind_mapper
        if orm_execute_state.is_delete and mapper is not None and mapper.class_ is Member:
            raise RuntimeError("storage went away")

    event.listen(db, "do_orm_execute", fail_member_delete)
    try:
        with pytest.raises(RuntimeError):
            delete_member(db, member_id)
    finally:
        event.remove(db, "do_orm_execute", fail_member_delete)

    assert db.query(Member).filter(Member.id == member_id).count() == 1
    assert db.query(PaymentTransaction).filter(PaymentTransaction.member_id == member_id).count() == 2
    assert db.query(MonthlyDue).filter(MonthlyDue.member_id == member_id).count() == 2
    assert db.query(MessageLog).filter(MessageLog.member_id == member_id).count() == 1


def test_delete_unknown_member(db):
    with pytest.raises(NotFoundError):
        delete_member(db, uuid.uuid4())
