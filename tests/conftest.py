import base64
import io
import struct
import zlib

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from checkin.config import Settings
from checkin.main import create_app
from checkin.models.subject import Subject
from checkin.models.user import User
from checkin.services.auth.session import issue_session_token

TEST_SECRET = 'test-secret-key-for-testing-only'


class FakeGeocoder:
    """Stands in for Nominatim; records every lookup"""

    def __init__(self, address='Rua das Flores, 10 - Centro - Curitiba'):
        self.address = address
        self.calls = []

    def reverse(self, lat, lng):
        self.calls.append((lat, lng))
        return self.address


def make_photo(fmt='PNG', size=(4, 4)):
    buf = io.BytesIO()
    Image.new('RGB', size, 'red').save(buf, format=fmt)
    return base64.b64encode(buf.getvalue()).decode('ascii')


def make_bomb_png(width=100_000, height=100_000):
    """A few hundred bytes of PNG whose header claims a huge canvas"""
    def chunk(kind, data):
        crc = zlib.crc32(kind + data) & 0xffffffff
        return struct.pack('>I', len(data)) + kind + data + struct.pack('>I', crc)

    ihdr = struct.pack('>IIBBBBB', width, height, 8, 2, 0, 0, 0)
    raw = (
        b'\x89PNG\r\n\x1a\n'
        + chunk(b'IHDR', ihdr)
        + chunk(b'IDAT', zlib.compress(b'\x00' * 64))
        + chunk(b'IEND', b'')
    )
    return base64.b64encode(raw).decode('ascii')


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        secret_key=TEST_SECRET,
        public_base_url='https://checkin.test',
        geocoder_enabled=False,
    )


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def app(settings, geocoder):
    """App over a throwaway SQLite file"""
    application = create_app(settings, geocoder=geocoder, configure_logging=False)
    yield application
    application.state.db.dispose()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def db_session(app):
    session = app.state.db.session()
    yield session
    session.rollback()
    session.close()


def _make_admin(db_session, email, name='Admin'):
    user = User(email=email, name=name)
    user.set_password('admin123')
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def admin_user(db_session):
    return _make_admin(db_session, 'admin@test.com')


@pytest.fixture
def other_admin(db_session):
    return _make_admin(db_session, 'other@test.com', name='Other Admin')


@pytest.fixture
def subject(db_session, admin_user):
    s = Subject(admin_id=admin_user.id, kind='customer', name='Maria Silva')
    db_session.add(s)
    db_session.commit()
    return s


@pytest.fixture
def other_subject(db_session, other_admin):
    s = Subject(admin_id=other_admin.id, kind='child', name='Joao')
    db_session.add(s)
    db_session.commit()
    return s


def auth_headers_for(user):
    token = issue_session_token(user.id, user.email, TEST_SECRET)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth_headers(admin_user):
    return auth_headers_for(admin_user)


@pytest.fixture
def photo():
    return make_photo()
