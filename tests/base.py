import os
import unittest
from urllib.parse import urlsplit

os.environ.setdefault("TESTING", "1")

from eventhub import create_app
from eventhub.extensions import db
from eventhub.models import User

PASS_SECRET = "test-pass-secret"


class FlaskResponse:
    """The bits of ``requests.Response`` the pass client reads."""

    def __init__(self, resp):
        self._resp = resp
        self.status_code = resp.status_code
        self.text = resp.get_data(as_text=True)

    def json(self):
        data = self._resp.get_json(silent=True)
        if data is None:
            raise ValueError("response body is not JSON")
        return data


class FlaskSession:
    """``requests.Session`` stand-in that routes calls to a Flask test client."""

    def __init__(self, client):
        self.client = client
        self.calls = []

    def request(self, method, url, headers=None, timeout=None, params=None, json=None):
        path = urlsplit(url).path
        self.calls.append((method, path))
        resp = self.client.open(
            path,
            method=method,
            headers=headers or {},
            query_string=params,
            json=json,
        )
        return FlaskResponse(resp)


class BaseTestCase(unittest.TestCase):
    config = {}

    def setUp(self):
        self.app = create_app({
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "WTF_CSRF_ENABLED": False,
            "SECRET_KEY": "test-secret",
            "PASS_SERVICE_URL": None,
            "PASS_SERVICE_SECRET": PASS_SECRET,
            "PASS_ID_PREFIX": "p_",
            **self.config,
        })
        self.client = self.app.test_client()

        with self.app.app_context():
            db.create_all()

            student = User(email="student@test.com", role="student")
            staff = User(email="staff@test.com", role="manager")
            db.session.add_all([student, staff])
            db.session.commit()

            self.student_id = student.id
            self.staff_id = staff.id

    def tearDown(self):
        with self.app.app_context():
            db.session.remove()
            db.drop_all()

    def login(self, user_id=None):
        with self.client.session_transaction() as sess:
            sess["_user_id"] = str(user_id or self.student_id)
            sess["_fresh"] = True

    def logout(self):
        with self.client.session_transaction() as sess:
            sess.clear()

    def internal_headers(self):
        return {"X-Pass-Secret": PASS_SECRET}

    def http_session(self):
        return FlaskSession(self.app.test_client())
