# backend/checkin/schemas/auth.py
from .commons import CamelModel


class LoginIn(CamelModel):
    email: str
    password: str


class UserOut(CamelModel):
    id: int
    email: str
    name: str


class LoginOut(CamelModel):
    token: str
    user: UserOut


class MeOut(CamelModel):
    user: UserOut
