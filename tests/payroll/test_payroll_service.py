from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.hris_payroll.hris_payroll.core.enums import AttendanceStatus, PayrollStatus, Role, SubscriptionStatus
from src.hris_payroll.hris_payroll.core.exceptions import (
    AuthorizationError,
    CannotDeletePaid,
    InvalidTransition,
    NotFoundError,
    PayrollLocked,
    SubscriptionExpired,
    ValidationError,
)
from src.hris_payroll.hris_payroll.core.permissions import Actor
from tests.fakes import OFFICE_LAT, OFFICE_LON, World

MARCH_WEEKDAYS = [date(2025, 3, day) for day in range(1, 32) if date(2025, 3, day).weekday() < 5]


def _generate(world: World, month: int = 3, year: int = 2025):
    return world.services.payroll_service.generate_payroll_period(
        actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, month=month, year=year
    )


def _only_payroll(world: World):
    [record] = world.store.payrolls.values()
    return record


def _calculate(world: World, payroll_id: int):
    return world.services.payroll_service.calculate_payroll(
        actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, payroll_id=payroll_id
    )


def _twenty_days_with_thirty_late_minutes(world: World):
    for day in MARCH_WEEKDAYS[:20]:
        late = 30 if day == MARCH_WEEKDAYS[0] else 0
        world.add_attendance(
            work_date=day,
            status=AttendanceStatus.LATE if late else AttendanceStatus.ON_TIME,
            late_minutes=late,
        )
    world.add_attendance(work_date=MARCH_WEEKDAYS[20], status=AttendanceStatus.ABSENT)


def test_generation_creates_one_draft_per_eligible_employee(world):
    result = _generate(world)

    assert (result.created, result.skipped) == (1, 0)
    record = _only_payroll(world)
    assert record.employee_id == World.EMPLOYEE_ID
    assert record.status == PayrollStatus.DRAFT
    assert record.basic_salary == Decimal("5000000")
    assert record.meal_allowance_snapshot == Decimal("20000")
    assert world.audit.events[0].action == "PAYROLL_GENERATED"


def test_generation_is_idempotent(world):
    _generate(world)

    result = _generate(world)

    assert (result.created, result.skipped) == (0, 1)
    assert len(world.store.payrolls) == 1


def test_generation_skips_employee_whose_profile_is_gone(world):
    world.add_employee(5, position_id=99)

    result = _generate(world)

    assert (result.created, result.skipped) == (1, 1)


def test_generation_rejects_invalid_period(world):
    with pytest.raises(ValidationError):
        _generate(world, month=13)


def test_generation_needs_active_subscription(world):
    world.add_company(World.COMPANY_ID, subscription=SubscriptionStatus.INACTIVE)

    with pytest.raises(SubscriptionExpired):
        _generate(world)


def test_profile_edits_do_not_touch_existing_payroll(world):
    _generate(world)

    world.services.salary_profile_service.update_profile(
        actor_id=world.ADMIN_ID,
        company_id=world.COMPANY_ID,
        position_id=World.POSITION_ID,
        position_name="Staff",
        base_salary="9000000",
        meal_allowance="20000",
        transport_allowance="15000",
        late_deduction_per_min="1000",
    )

    assert _only_payroll(world).basic_salary == Decimal("5000000")


def test_calculation_computes_net_and_locks_the_month(world):
    _twenty_days_with_thirty_late_minutes(world)
    april = world.add_attendance(work_date=date(2025, 4, 1))
    _generate(world)

    record = _calculate(world, _only_payroll(world).payroll_id)

    assert record.status == PayrollStatus.REVIEW
    assert record.total_attendance == 20
    assert record.total_late_minutes == 30
    assert record.deductions == Decimal("30000.00")
    assert record.net_salary == Decimal("5670000.00")

    march_rows = [r for r in world.store.attendance.values() if r.work_date.month == 3]
    assert len(march_rows) == 21
    assert all(r.is_payroll_processed and r.payroll_id == record.payroll_id for r in march_rows)
    assert world.attendance.get_by_id(april.attendance_id).is_payroll_processed is False


def test_clock_in_on_a_calculated_day_is_rejected(world):
    world.add_attendance(work_date=date(2025, 3, 3), status=AttendanceStatus.ABSENT)
    _generate(world)
    _calculate(world, _only_payroll(world).payroll_id)
    world.clock.now = datetime(2025, 3, 3, 7, 50)

    with pytest.raises(PayrollLocked):
        world.services.attendance_service.record_clock_event(
            World.EMPLOYEE_ID, "In", coordinates=(OFFICE_LAT, OFFICE_LON)
        )


def test_review_payroll_can_be_recalculated(world):
    _generate(world)
    payroll_id = _only_payroll(world).payroll_id
    _calculate(world, payroll_id)

    record = _calculate(world, payroll_id)

    assert record.status == PayrollStatus.REVIEW


def test_approved_payroll_cannot_be_recalculated(world):
    _generate(world)
    payroll_id = _only_payroll(world).payroll_id
    _calculate(world, payroll_id)
    world.services.payroll_service.approve_all_monthly(actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, month=3, year=2025)

    with pytest.raises(InvalidTransition):
        _calculate(world, payroll_id)


def test_delete_unlocks_attendance(world):
    _twenty_days_with_thirty_late_minutes(world)
    _generate(world)
    payroll_id = _only_payroll(world).payroll_id
    _calculate(world, payroll_id)

    world.services.payroll_service.delete_payroll(actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, payroll_id=payroll_id)

    assert world.store.payrolls == {}
    assert not any(r.is_payroll_processed or r.payroll_id for r in world.store.attendance.values())
    assert world.audit.events[-1].details["unlocked"] == 21


def test_paid_payroll_cannot_be_deleted(world):
    _generate(world)
    payroll_id = _only_payroll(world).payroll_id
    _calculate(world, payroll_id)
    world.services.payroll_service.record_bulk_payment(actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, payroll_ids=[payroll_id])

    with pytest.raises(CannotDeletePaid):
        world.services.payroll_service.delete_payroll(actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, payroll_id=payroll_id)

    assert world.payrolls.get_by_id(payroll_id).status == PayrollStatus.PAID


def test_approve_all_moves_only_review_records(world):
    world.add_employee(6)
    _generate(world)
    first, second = sorted(world.store.payrolls)
    _calculate(world, first)

    count = world.services.payroll_service.approve_all_monthly(
        actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, month=3, year=2025
    )

    assert count == 1
    assert world.payrolls.get_by_id(first).status == PayrollStatus.APPROVED
    assert world.payrolls.get_by_id(second).status == PayrollStatus.DRAFT


def test_bulk_payment_skips_drafts(world):
    world.add_employee(6)
    world.clock.now = datetime(2025, 4, 1, 10, 0)
    _generate(world)
    first, second = sorted(world.store.payrolls)
    _calculate(world, first)

    count = world.services.payroll_service.record_bulk_payment(
        actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, payroll_ids=[first, second]
    )

    assert count == 1
    paid = world.payrolls.get_by_id(first)
    assert paid.status == PayrollStatus.PAID
    assert paid.paid_at == datetime(2025, 4, 1, 10, 0)
    assert paid.payment_method == "MANUAL"
    assert world.payrolls.get_by_id(second).status == PayrollStatus.DRAFT


def test_bulk_payment_needs_a_selection(world):
    with pytest.raises(ValidationError):
        world.services.payroll_service.record_bulk_payment(actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, payroll_ids=[])


def test_status_moves_forward_one_step_at_a_time(world):
    _generate(world)
    payroll_id = _only_payroll(world).payroll_id
    service = world.services.payroll_service
    _calculate(world, payroll_id)

    with pytest.raises(InvalidTransition):
        service.update_status(actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, payroll_id=payroll_id, status="Paid")

    for status in ("Approved", "Paid"):
        record = service.update_status(actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, payroll_id=payroll_id, status=status)
        assert record.status == PayrollStatus(status)

    with pytest.raises(InvalidTransition):
        service.update_status(actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, payroll_id=payroll_id, status="Draft")


def test_draft_reaches_review_only_through_calculation(world):
    world.add_attendance(work_date=date(2025, 3, 3))
    _generate(world)
    payroll_id = _only_payroll(world).payroll_id

    with pytest.raises(InvalidTransition) as exc:
        world.services.payroll_service.update_status(
            actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, payroll_id=payroll_id, status="Review"
        )

    assert "Calculate" in str(exc.value)
    assert world.payrolls.get_by_id(payroll_id).status == PayrollStatus.DRAFT
    assert not any(r.is_payroll_processed for r in world.store.attendance.values())


def test_payslip_visibility(world):
    world.add_employee(6)
    _generate(world)
    own, other = sorted(world.store.payrolls)
    service = world.services.payroll_service
    employee = Actor(employee_id=World.EMPLOYEE_ID, company_id=World.COMPANY_ID, role=Role.EMPLOYEE)
    foreign_admin = Actor(employee_id=77, company_id=2, role=Role.ADMIN)

    assert service.get_payroll_detail(own, employee).payroll.payroll_id == own
    with pytest.raises(AuthorizationError):
        service.get_payroll_detail(other, employee)
    with pytest.raises(NotFoundError):
        service.get_payroll_detail(own, foreign_admin)


def test_my_payslips_lists_only_approved_and_paid(world):
    _generate(world)
    _generate(world, month=4)
    march, april = sorted(world.store.payrolls)
    _calculate(world, march)
    world.services.payroll_service.approve_all_monthly(actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, month=3, year=2025)

    slips = world.services.payroll_service.my_payslips(World.EMPLOYEE_ID)

    assert [p.payroll_id for p in slips] == [march]


def test_paid_stats(world):
    _twenty_days_with_thirty_late_minutes(world)
    _generate(world)
    payroll_id = _only_payroll(world).payroll_id
    _calculate(world, payroll_id)
    world.services.payroll_service.record_bulk_payment(actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, payroll_ids=[payroll_id])

    stats = world.services.payroll_service.payroll_stats(World.COMPANY_ID)

    assert stats.paid_count == 1
    assert stats.total_paid == Decimal("5670000.00")


@pytest.mark.parametrize(
    "action",
    [
        lambda s, pid: s.approve_all_monthly(actor_id=World.ADMIN_ID, company_id=World.COMPANY_ID, month=3, year=2025),
        lambda s, pid: s.record_bulk_payment(actor_id=World.ADMIN_ID, company_id=World.COMPANY_ID, payroll_ids=[pid]),
        lambda s, pid: s.update_status(actor_id=World.ADMIN_ID, company_id=World.COMPANY_ID, payroll_id=pid, status="Approved"),
        lambda s, pid: s.delete_payroll(actor_id=World.ADMIN_ID, company_id=World.COMPANY_ID, payroll_id=pid),
    ],
    ids=["approve_all", "bulk_payment", "update_status", "delete"],
)
def test_payroll_changes_need_active_subscription(world, action):
    _generate(world)
    payroll_id = _only_payroll(world).payroll_id
    _calculate(world, payroll_id)
    world.add_company(World.COMPANY_ID, subscription=SubscriptionStatus.EXPIRED)

    with pytest.raises(SubscriptionExpired):
        action(world.services.payroll_service, payroll_id)

    record = world.payrolls.get_by_id(payroll_id)
    assert record is not None
    assert record.status == PayrollStatus.REVIEW


def test_calculation_is_atomic(world, monkeypatch):
    _twenty_days_with_thirty_late_minutes(world)
    _generate(world)
    payroll_id = _only_payroll(world).payroll_id

    def fail(**kwargs):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(world.payrolls, "save_calculation", fail)

    with pytest.raises(RuntimeError):
        _calculate(world, payroll_id)

    assert not any(r.is_payroll_processed or r.payroll_id for r in world.store.attendance.values())
    assert world.payrolls.get_by_id(payroll_id).status == PayrollStatus.DRAFT
    assert [e.action for e in world.audit.events] == ["PAYROLL_GENERATED"]


def test_delete_is_atomic(world, monkeypatch):
    _twenty_days_with_thirty_late_minutes(world)
    _generate(world)
    payroll_id = _only_payroll(world).payroll_id
    _calculate(world, payroll_id)

    def fail(payroll_id):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(world.payrolls, "delete_unless_paid", fail)

    with pytest.raises(RuntimeError):
        world.services.payroll_service.delete_payroll(
            actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, payroll_id=payroll_id
        )

    assert world.payrolls.get_by_id(payroll_id) is not None
    rows = list(world.store.attendance.values())
    assert len(rows) == 21
    assert all(r.is_payroll_processed and r.payroll_id == payroll_id for r in rows)


def test_global_log_lists_newest_payrolls_across_companies(world):
    world.add_company(2)
    profile = world.add_profile(company_id=2, position_name="Cashier", base_salary="4000000")
    world.add_employee(7, company_id=2, position_id=profile.position_id)
    _generate(world)
    world.services.payroll_service.generate_payroll_period(actor_id=world.ADMIN_ID, company_id=2, month=3, year=2025)

    records = world.services.payroll_service.list_recent_global()
    assert [r.company_id for r in records] == [2, 1]

    assert len(world.services.payroll_service.list_recent_global(limit=1)) == 1
