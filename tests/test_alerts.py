"""
Alert emitter: mark read, mark all read, listing
"""
import pytest

from checkin.errors import NotFound
from checkin.models.alert import Alert, CAPTURE_COMPLETED
from checkin.services.alerts.emitter import AlertEmitter

pytestmark = pytest.mark.unit


def seed_alerts(db_session, subject, count):
    for i in range(count):
        db_session.add(Alert(subject_id=subject.id, kind=CAPTURE_COMPLETED, message=f'alert {i}'))
    db_session.commit()


def unread(db_session, subject):
    return db_session.query(Alert).filter_by(subject_id=subject.id, read=False).count()


def test_mark_all_read_only_touches_owner(db_session, subject, other_subject):
    seed_alerts(db_session, subject, 5)
    seed_alerts(db_session, other_subject, 3)

    updated = AlertEmitter(db_session).mark_all_read(subject.id)
    db_session.commit()

    assert updated == 5
    assert unread(db_session, subject) == 0
    assert unread(db_session, other_subject) == 3


def test_mark_all_read_twice(db_session, subject):
    seed_alerts(db_session, subject, 2)
    emitter = AlertEmitter(db_session)
    assert emitter.mark_all_read(subject.id) == 2
    assert emitter.mark_all_read(subject.id) == 0


def test_mark_read_is_idempotent(db_session, subject):
    seed_alerts(db_session, subject, 2)
    alert = db_session.query(Alert).filter_by(subject_id=subject.id).first()
    emitter = AlertEmitter(db_session)

    emitter.mark_read(alert.id)
    emitter.mark_read(alert.id)
    db_session.commit()

    assert db_session.get(Alert, alert.id).read is True
    assert unread(db_session, subject) == 1


def test_mark_read_outside_scope(db_session, subject, other_subject):
    seed_alerts(db_session, other_subject, 1)
    alert = db_session.query(Alert).filter_by(subject_id=other_subject.id).one()
    with pytest.raises(NotFound):
        AlertEmitter(db_session).mark_read(alert.id, owner_ids=[subject.id])


def test_mark_read_unknown(db_session):
    with pytest.raises(NotFound):
        AlertEmitter(db_session).mark_read(12345)


def test_list_and_unread_count(db_session, subject):
    seed_alerts(db_session, subject, 4)
    emitter = AlertEmitter(db_session)
    first = db_session.query(Alert).filter_by(subject_id=subject.id).order_by(Alert.id).first()
    emitter.mark_read(first.id)
    db_session.commit()

    assert len(emitter.list([subject.id])) == 4
    assert len(emitter.list([subject.id], unread_only=True)) == 3
    assert len(emitter.list([subject.id], limit=2)) == 2
    assert emitter.unread_count([subject.id]) == 3
    assert emitter.list([]) == []
    assert emitter.unread_count([]) == 0
