"""Tests for the signed student identity."""

import pytest
from jose import jwt

from ekwento.config import settings
from ekwento.services.result import UnauthorizedError, ValidationError
from ekwento.services.student_session import StudentIdentity, student_session_service


class TestRegisterStudent:
    def test_generates_device_id(self):
        identity = student_session_service.register_student(" Juan ", "10-A", "abcd")
        assert identity.name == "Juan"
        assert identity.authorized_code == "ABCD"
        assert len(identity.device_id) == 36

    def test_keeps_given_device_id(self):
        identity = student_session_service.register_student("Juan", "10-A", "ABCD", "d1")
        assert identity.device_id == "d1"

    @pytest.mark.parametrize("name, section", [("", "10-A"), ("Juan", None), ("J", "10-A"), ("Juan", "A")])
    def test_rejects_incomplete_information(self, name, section):
        with pytest.raises(ValidationError):
            student_session_service.register_student(name, section, "ABCD")


class TestTokens:
    def test_round_trip(self):
        identity = StudentIdentity(name="Juan", section="10-A", device_id="d1", authorized_code="ABCD")
        restored = student_session_service.read_token(student_session_service.issue_token(identity))
        assert (restored.name, restored.section, restored.device_id, restored.authorized_code) == (
            "Juan", "10-A", "d1", "ABCD"
        )
        assert restored.issued_at is not None

    def test_tampered_payload_is_rejected(self):
        token = student_session_service.issue_token(
            StudentIdentity(name="Juan", section="10-A", device_id="d1", authorized_code="ABCD")
        )
        header, payload, signature = token.split(".")
        forged = jwt.encode(
            {"name": "Pedro", "section": "10-A", "device_id": "d1", "authorized_code": "ZZZZ"},
            "not-the-server-secret",
            algorithm=settings.algorithm
        )
        forged_payload = forged.split(".")[1]

        with pytest.raises(UnauthorizedError):
            student_session_service.read_token(f"{header}.{forged_payload}.{signature}")
        with pytest.raises(UnauthorizedError):
            student_session_service.read_token(forged)

    def test_missing_token(self):
        with pytest.raises(UnauthorizedError):
            student_session_service.read_token(None)

    def test_token_without_name(self):
        token = jwt.encode({"section": "10-A"}, settings.secret_key, algorithm=settings.algorithm)
        with pytest.raises(UnauthorizedError):
            student_session_service.read_token(token)
