"""Tests for access-code resolution and code management."""

import string

from ekwento.models import Code, CodeStatus, Notification
from ekwento.services.code_service import code_service
from ekwento.services.result import ErrorKind
from ekwento.utils.timeutils import utcnow


class TestResolveCode:
    def test_resolution_is_case_insensitive(self, db, seeded):
        result = code_service.resolve_code(db, "abcd")
        assert result.success is True
        assert result.data.code == "ABCD"
        assert result.data.story.id == seeded["story"].id
        assert [q.quiz_number for q in result.data.story.quiz_items] == [1, 2]

    def test_student_quiz_items_hide_correct_answer(self, db, seeded):
        result = code_service.resolve_code(db, "ABCD")
        item = result.data.story.quiz_items[0].model_dump()
        assert "correct_answer" not in item
        assert item["choices"] == ["Pagong", "Matsing"]

    def test_unknown_code_is_not_found(self, db, seeded):
        result = code_service.resolve_code(db, "ZZZZ")
        assert result.success is False
        assert result.kind == ErrorKind.not_found

    def test_inactive_code_only_resolves_when_asked(self, db, factory, seeded):
        factory.code(seeded["story"], "QWER", status=CodeStatus.inactive)

        assert code_service.resolve_code(db, "QWER").kind == ErrorKind.not_found

        result = code_service.resolve_code(db, "qwer", active_only=False)
        assert result.success is True
        assert result.data.is_active is False

    def test_deleted_code_never_resolves(self, db, seeded):
        seeded["code"].deleted_at = utcnow()
        db.commit()
        assert code_service.resolve_code(db, "ABCD", active_only=False).kind == ErrorKind.not_found

    def test_code_of_deleted_story_does_not_resolve(self, db, seeded):
        seeded["story"].deleted_at = utcnow()
        db.commit()
        assert code_service.resolve_code(db, "ABCD").kind == ErrorKind.not_found


class TestValidateCodeEntry:
    def test_short_code_is_rejected(self, db, seeded):
        result = code_service.validate_code_entry(db, "ab")
        assert result.kind == ErrorKind.validation
        assert "at least 4" in result.error

    def test_blank_code_is_rejected(self, db, seeded):
        assert code_service.validate_code_entry(db, None).kind == ErrorKind.validation

    def test_valid_code_redirects_to_info_form(self, db, seeded):
        result = code_service.validate_code_entry(db, " abcd ")
        assert result.success is True
        assert result.data == {"code": "ABCD", "redirect_to": "/student/info?code=ABCD"}

    def test_inactive_code_is_invalid(self, db, seeded):
        seeded["code"].status = CodeStatus.inactive
        db.commit()
        result = code_service.validate_code_entry(db, "ABCD")
        assert result.kind == ErrorKind.not_found
        assert result.error == "Invalid code. Please check and try again."


class TestGenerateCode:
    def test_generated_code_shape(self, db, seeded, teacher):
        result = code_service.generate_access_code(db, seeded["story"].id, teacher.id)
        assert result.success is True
        code = result.data
        assert len(code.code) == 6
        assert set(code.code) <= set(string.ascii_uppercase + string.digits)
        assert code.status == CodeStatus.active
        assert code.created_by == teacher.id

    def test_generation_emits_notification(self, db, seeded):
        code_service.generate_access_code(db, seeded["story"].id)
        notification = db.query(Notification).filter(Notification.type == "code_generated").one()
        assert seeded["story"].title in notification.message

    def test_unknown_story(self, db, seeded):
        result = code_service.generate_access_code(db, 9999)
        assert result.kind == ErrorKind.not_found

    def test_generated_codes_are_unique(self, db, seeded):
        codes = {code_service.generate_access_code(db, seeded["story"].id).data.code for _ in range(10)}
        assert len(codes) == 10
        assert db.query(Code).count() == 11


class TestCodeManagement:
    def test_status_update_and_soft_delete(self, db, seeded):
        code_id = seeded["code"].id
        result = code_service.update_code_status(db, code_id, CodeStatus.inactive)
        assert result.data.status == CodeStatus.inactive

        assert code_service.delete_code(db, code_id).success is True
        assert code_service.list_codes(db).data == []
        assert code_service.update_code_status(db, code_id, CodeStatus.active).kind == ErrorKind.not_found

    def test_list_codes_filters_by_story(self, db, factory, seeded):
        other = factory.story(title="Si Malakas at si Maganda")
        factory.code(other, "MLKS")
        codes = code_service.list_codes(db, seeded["story"].id).data
        assert [c.code for c in codes] == ["ABCD"]


class TestCodesApi:
    def test_requires_bearer_token(self, client, seeded):
        resp = client.get("/codes")
        assert resp.status_code in (401, 403)

    def test_generate_and_list(self, teacher_client, seeded):
        resp = teacher_client.post("/codes", json={"story_id": seeded["story"].id})
        assert resp.status_code == 200
        new_code = resp.json()["code"]["code"]

        resp = teacher_client.get("/codes", params={"story_id": seeded["story"].id})
        assert {c["code"] for c in resp.json()["codes"]} == {"ABCD", new_code}

    def test_deactivate(self, teacher_client, seeded):
        resp = teacher_client.patch(f"/codes/{seeded['code'].id}/status", json={"status": "inactive"})
        assert resp.status_code == 200
        assert resp.json()["code"]["status"] == "inactive"

    def test_missing_code_is_404(self, teacher_client, seeded):
        assert teacher_client.delete("/codes/9999").status_code == 404

    def test_student_code_entry(self, client, seeded):
        resp = client.post("/student/code", json={"code": "abcd"})
        assert resp.status_code == 200
        assert resp.json()["redirect_to"] == "/student/info?code=ABCD"

        assert client.post("/student/code", json={"code": "ab"}).status_code == 400
        assert client.post("/student/code", json={"code": "NOPE"}).status_code == 404
