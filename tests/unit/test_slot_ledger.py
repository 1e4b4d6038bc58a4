"""Tests for the per-doctor slot ledger."""
from app.extensions import db
from app.models import Doctor, SlotDate, SlotReservation
from app.services import slot_ledger


def test_try_reserve_records_slot(doctor):
    """Reserving a free slot should add it to the ledger."""
    assert slot_ledger.try_reserve(doctor.id, "1_4_2025", "10:00") is True
    db.session.commit()

    assert Doctor.query.get(doctor.id).slots_booked == {"1_4_2025": ["10:00"]}


def test_try_reserve_rejects_taken_slot(doctor):
    """A slot can be held only once per doctor and date."""
    assert slot_ledger.try_reserve(doctor.id, "1_4_2025", "10:00") is True
    db.session.commit()

    assert slot_ledger.try_reserve(doctor.id, "1_4_2025", "10:00") is False
    assert SlotReservation.query.filter_by(doctor_id=doctor.id).count() == 1


def test_same_time_on_other_date_or_doctor_is_free(make_doctor):
    """Keys are (doctor, date, time); changing either dimension is a different slot."""
    first = make_doctor()
    second = make_doctor()

    assert slot_ledger.try_reserve(first.id, "1_4_2025", "10:00") is True
    assert slot_ledger.try_reserve(first.id, "2_4_2025", "10:00") is True
    assert slot_ledger.try_reserve(second.id, "1_4_2025", "10:00") is True
    db.session.commit()

    assert first.slots_booked == {"1_4_2025": ["10:00"], "2_4_2025": ["10:00"]}
    assert second.slots_booked == {"1_4_2025": ["10:00"]}


def test_ledger_keeps_insertion_order(doctor):
    """Times are listed in booking order, not sorted."""
    for time in ["14:00", "9:30", "11:00"]:
        assert slot_ledger.try_reserve(doctor.id, "5_6_2025", time)
    db.session.commit()

    assert slot_ledger.booked_times(doctor.id, "5_6_2025") == ["14:00", "9:30", "11:00"]
    assert Doctor.query.get(doctor.id).slots_booked["5_6_2025"] == ["14:00", "9:30", "11:00"]


def test_release_removes_slot(doctor):
    """Released times disappear from the ledger; the date key stays."""
    slot_ledger.try_reserve(doctor.id, "1_4_2025", "10:00")
    slot_ledger.try_reserve(doctor.id, "1_4_2025", "11:00")
    db.session.commit()

    removed = slot_ledger.release(doctor.id, "1_4_2025", "10:00")
    db.session.commit()

    assert removed == 1
    assert slot_ledger.booked_times(doctor.id, "1_4_2025") == ["11:00"]
    assert slot_ledger.is_booked(doctor.id, "1_4_2025", "10:00") is False
    assert Doctor.query.get(doctor.id).slots_booked == {"1_4_2025": ["11:00"]}


def test_release_of_last_time_leaves_empty_date(doctor):
    """Once every time of a date is released the ledger lists the date with no times."""
    slot_ledger.try_reserve(doctor.id, "1_4_2025", "10:00")
    db.session.commit()

    slot_ledger.release(doctor.id, "1_4_2025", "10:00")
    db.session.commit()

    ledger = Doctor.query.get(doctor.id).slots_booked
    assert ledger["1_4_2025"] == []
    assert SlotDate.query.filter_by(doctor_id=doctor.id).count() == 1

    assert slot_ledger.try_reserve(doctor.id, "1_4_2025", "10:00") is True
    db.session.commit()
    assert Doctor.query.get(doctor.id).slots_booked == {"1_4_2025": ["10:00"]}
    assert SlotDate.query.filter_by(doctor_id=doctor.id).count() == 1


def test_release_of_absent_slot_is_noop(doctor):
    """Releasing something that is not booked is not an error."""
    assert slot_ledger.release(doctor.id, "1_4_2025", "10:00") == 0


def test_reservations_deleted_with_doctor(doctor):
    """The ledger belongs to the doctor record."""
    slot_ledger.try_reserve(doctor.id, "1_4_2025", "10:00")
    db.session.commit()

    db.session.delete(Doctor.query.get(doctor.id))
    db.session.commit()

    assert SlotReservation.query.count() == 0
    assert SlotDate.query.count() == 0
