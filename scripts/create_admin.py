# scripts/create_admin.py
# usage: python scripts/create_admin.py admin@example.com "Admin Name" <password>
import sys

from checkin.config import Settings
from checkin.db import Database
from checkin.models.user import User

if len(sys.argv) != 4:
    sys.exit("usage: create_admin.py EMAIL NAME PASSWORD")

email, name, password = sys.argv[1].strip().lower(), sys.argv[2], sys.argv[3]

db = Database(Settings().database_url)
db.init_db()
with db.session() as s:
    user = s.query(User).filter(User.email == email).one_or_none()
    if user is None:
        user = User(email=email, name=name)
        s.add(user)
    user.name = name
    user.set_password(password)
    s.commit()
    print(user.id, user.email)
