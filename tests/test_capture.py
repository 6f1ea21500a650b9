"""
Capture ingest: validation, persistence, geofence alerts, atomicity
"""
import pytest
from sqlalchemy.exc import OperationalError

from checkin.errors import Internal, InvalidToken, NotFound, ValidationError
from checkin.models.access_log import AccessLog
from checkin.models.alert import Alert, CAPTURE_COMPLETED, GEOFENCE_VIOLATED
from checkin.models.capture import Capture
from checkin.models.geofence import Geofence
from checkin.models.token import AccessToken
from checkin.services.alerts.emitter import AlertEmitter
from checkin.services.capture.ingest import CaptureIngest
from checkin.services.tokens.lifecycle import TokenLifecycle

from conftest import FakeGeocoder, make_bomb_png, make_photo


@pytest.fixture
def tokens(db_session):
    return TokenLifecycle(db_session)


@pytest.fixture
def ingest(db_session, tokens, geocoder):
    return CaptureIngest(db_session, tokens, geocoder=geocoder)


@pytest.fixture
def link(db_session, tokens, subject):
    token = tokens.issue(subject.id)
    db_session.commit()
    return token.token


def add_zone(db_session, subject, name, lat, lng, radius, active=True):
    g = Geofence(subject_id=subject.id, name=name, center_lat=lat, center_lng=lng, radius_m=radius, active=active)
    db_session.add(g)
    db_session.commit()
    return g


class TestSubmit:

    def test_submit_persists_capture_and_uses_token(self, db_session, ingest, link, subject, photo, geocoder):
        result = ingest.submit(
            link, photo, -25.43, -49.27, {'language': 'pt-BR'},
            consent=True, ip='10.0.0.1', user_agent='Mozilla/5.0',
        )

        cap = db_session.get(Capture, result.capture.id)
        assert cap.subject_id == subject.id
        assert cap.latitude == -25.43 and cap.longitude == -49.27
        assert cap.photo.startswith('data:image/png;base64,')
        assert cap.address == geocoder.address
        assert cap.ip == '10.0.0.1'
        assert cap.user_agent == 'Mozilla/5.0'
        assert cap.device_metadata == {'language': 'pt-BR'}
        assert cap.consented_at is not None
        assert geocoder.calls == [(-25.43, -49.27)]

        token = db_session.query(AccessToken).filter_by(token=link).one()
        assert token.used is True
        db_session.refresh(subject)
        assert subject.status == 'verified'
        assert result.violated_zones == []
        assert result.out_of_bounds is False

    def test_completed_alert_and_audit_entry(self, db_session, ingest, link, subject, admin_user, photo, geocoder):
        result = ingest.submit(link, photo, 1.0, 2.0, consent=True)

        alerts = db_session.query(Alert).filter_by(subject_id=subject.id).all()
        assert [a.kind for a in alerts] == [CAPTURE_COMPLETED]
        assert alerts[0].capture_id == result.capture.id
        assert alerts[0].read is False
        assert geocoder.address in alerts[0].message

        entry = db_session.query(AccessLog).filter_by(action='CAPTURE').one()
        assert entry.user_id == admin_user.id

    def test_replay_rejected(self, ingest, link, photo):
        ingest.submit(link, photo, 0, 0, consent=True)
        with pytest.raises(InvalidToken) as exc:
            ingest.submit(link, photo, 0, 0, consent=True)
        assert exc.value.reason == 'already used'

    def test_unknown_token(self, ingest, photo):
        with pytest.raises(NotFound):
            ingest.submit('not-a-token', photo, 0, 0, consent=True)

    def test_jpeg_accepted_as_data_uri(self, db_session, ingest, link):
        jpeg = 'data:image/jpeg;base64,' + make_photo('JPEG')
        result = ingest.submit(link, jpeg, 0, 0, consent=True)
        assert db_session.get(Capture, result.capture.id).photo.startswith('data:image/jpeg;base64,')

    def test_geocoder_returning_nothing_leaves_address_empty(self, db_session, tokens, link, photo):
        ingest = CaptureIngest(db_session, tokens, geocoder=FakeGeocoder(address=None))
        result = ingest.submit(link, photo, 0, 0, consent=True)
        assert result.capture.address is None

    def test_without_geocoder(self, db_session, tokens, link, photo):
        result = CaptureIngest(db_session, tokens).submit(link, photo, 0, 0, consent=True)
        assert result.capture.address is None

    def test_geocoder_crash_leaves_address_empty(self, db_session, tokens, link, photo):
        class BrokenGeocoder:
            def reverse(self, lat, lng):
                raise RuntimeError('connection reset')

        result = CaptureIngest(db_session, tokens, geocoder=BrokenGeocoder()).submit(
            link, photo, 0, 0, consent=True,
        )
        assert result.capture.address is None
        assert db_session.query(AccessToken).filter_by(token=link).one().used is True


class TestValidation:

    @pytest.mark.parametrize('field, kwargs, message', [
        ('token', {'token_string': None}, 'token is required'),
        ('photo', {'photo': ''}, 'photo is required'),
        ('latitude', {'lat': None}, 'location is required'),
        ('longitude', {'lng': None}, 'location is required'),
        ('range', {'lat': 91.0}, 'location is out of range'),
        ('consent', {'consent': False}, 'consent is required'),
    ])
    def test_missing_or_bad_fields(self, db_session, ingest, link, photo, field, kwargs, message):
        args = {'token_string': link, 'photo': photo, 'lat': 0.0, 'lng': 0.0, 'consent': True}
        args.update(kwargs)
        with pytest.raises(ValidationError) as exc:
            ingest.submit(
                args['token_string'], args['photo'], args['lat'], args['lng'],
                consent=args['consent'],
            )
        assert exc.value.message == message
        # nothing consumed
        assert db_session.query(AccessToken).filter_by(token=link).one().used is False

    def test_not_an_image(self, ingest, link):
        with pytest.raises(ValidationError):
            ingest.submit(link, 'aGVsbG8gd29ybGQ=', 0, 0, consent=True)

    def test_decompression_bomb(self, db_session, ingest, link):
        with pytest.raises(ValidationError) as exc:
            ingest.submit(link, make_bomb_png(), 0, 0, consent=True)
        assert exc.value.message == 'photo is not a valid image'
        assert db_session.query(AccessToken).filter_by(token=link).one().used is False

    def test_photo_too_large(self, db_session, tokens, link):
        ingest = CaptureIngest(db_session, tokens, max_photo_bytes=10)
        with pytest.raises(ValidationError) as exc:
            ingest.submit(link, make_photo(), 0, 0, consent=True)
        assert exc.value.message == 'photo is too large'

    def test_expired_token(self, db_session, tokens, link, photo):
        from datetime import timedelta
        from checkin.models.base import utcnow
        token = db_session.query(AccessToken).filter_by(token=link).one()
        token.expires_at = utcnow() - timedelta(minutes=5)
        db_session.commit()

        with pytest.raises(InvalidToken) as exc:
            CaptureIngest(db_session, tokens).submit(link, photo, 0, 0, consent=True)
        assert exc.value.reason == 'expired'
        assert db_session.query(Capture).count() == 0


class TestGeofences:

    def test_inside_all_zones_no_geofence_alerts(self, db_session, ingest, link, subject, photo):
        add_zone(db_session, subject, 'Home', 0, 0, 500)
        add_zone(db_session, subject, 'Block', 0, 0.001, 300)

        result = ingest.submit(link, photo, 0, 0.0005, consent=True)

        assert result.violated_zones == []
        kinds = [a.kind for a in db_session.query(Alert).filter_by(subject_id=subject.id)]
        assert GEOFENCE_VIOLATED not in kinds

    def test_outside_one_zone(self, db_session, ingest, link, subject, photo):
        add_zone(db_session, subject, 'Home', 0, 0, 500)
        add_zone(db_session, subject, 'City', 0, 0, 50_000)

        result = ingest.submit(link, photo, 0, 0.01, consent=True)

        assert result.violated_zones == ['Home']
        assert result.out_of_bounds is True
        violations = db_session.query(Alert).filter_by(subject_id=subject.id, kind=GEOFENCE_VIOLATED).all()
        assert len(violations) == 1
        assert '"Home"' in violations[0].message
        assert violations[0].capture_id == result.capture.id

    def test_inactive_zone_ignored(self, db_session, ingest, link, subject, photo):
        add_zone(db_session, subject, 'Paused', 0, 0, 10, active=False)
        result = ingest.submit(link, photo, 0, 0.01, consent=True)
        assert result.violated_zones == []

    def test_other_subjects_zones_ignored(self, db_session, ingest, link, other_subject, photo):
        add_zone(db_session, other_subject, 'Elsewhere', 40, 40, 10)
        result = ingest.submit(link, photo, 0, 0, consent=True)
        assert result.violated_zones == []


class TestAtomicity:

    def test_storage_failure_rolls_everything_back(self, db_session, ingest, link, subject, photo, monkeypatch):
        def boom(self, subject, capture):
            raise OperationalError('INSERT INTO alerts', {}, Exception('disk I/O error'))

        monkeypatch.setattr(AlertEmitter, 'capture_completed', boom)

        with pytest.raises(Internal):
            ingest.submit(link, photo, 0, 0, consent=True)

        assert db_session.query(Capture).count() == 0
        assert db_session.query(Alert).count() == 0
        assert db_session.query(AccessToken).filter_by(token=link).one().used is False

        # the link still works once storage recovers
        monkeypatch.undo()
        result = ingest.submit(link, photo, 0, 0, consent=True)
        assert result.capture.id is not None
