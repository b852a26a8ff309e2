"""End-to-end tests of the student flow: code, info, story, quiz, results."""

from fastapi.testclient import TestClient

from ekwento.main import app
from ekwento.models import CodeStatus, StudentStoryView
from ekwento.services.student_session import STUDENT_INFO_COOKIE, PRIVACY_CONSENT_COOKIE


def register(client, code="ABCD", name="Juan", section="10-A", device_id="d1"):
    return client.post("/student/info", json={
        "name": name, "section": section, "code": code, "device_id": device_id
    })


def answer_all(client, seeded, code="ABCD"):
    first, second = seeded["items"]
    return client.post(f"/student/quiz/{code}/submit", json={"answers": [
        {"quiz_item_id": first.id, "selected_answer": "Pagong"},
        {"quiz_item_id": second.id, "selected_answer": "Kalabaw"},
    ]})


class TestStudentInfo:
    def test_sets_both_cookies(self, client, seeded):
        resp = register(client, code="abcd")
        assert resp.status_code == 200
        body = resp.json()
        assert body["redirect_to"] == "/student/story/ABCD"
        assert body["student"]["authorized_code"] == "ABCD"
        assert resp.cookies.get(STUDENT_INFO_COOKIE)
        assert resp.cookies.get(PRIVACY_CONSENT_COOKIE) == "true"

        set_cookie = " ".join(resp.headers.get_list("set-cookie")).lower()
        assert "httponly" in set_cookie
        assert "samesite=strict" in set_cookie
        assert "max-age=2592000" in set_cookie

    def test_short_name_is_rejected(self, client, seeded):
        resp = register(client, name="J")
        assert resp.status_code == 400
        assert STUDENT_INFO_COOKIE not in resp.cookies

    def test_inactive_code_is_rejected(self, client, seeded, db):
        seeded["code"].status = CodeStatus.inactive
        db.commit()
        assert register(client).status_code == 404

    def test_session_endpoint(self, client, seeded):
        register(client)
        resp = client.get("/student/session")
        assert resp.json()["student"] == {
            "name": "Juan", "section": "10-A", "device_id": "d1", "authorized_code": "ABCD"
        }

    def test_device_id_is_kept_when_registering_again(self, client, factory, seeded):
        factory.code(seeded["story"], "EFGH")
        register(client, device_id=None)
        first = client.get("/student/session").json()["student"]["device_id"]

        register(client, code="EFGH", device_id=None)
        student = client.get("/student/session").json()["student"]
        assert student["device_id"] == first
        assert student["authorized_code"] == "EFGH"


class TestFullFlow:
    def test_watch_answer_and_review(self, client, db, seeded):
        register(client)

        resp = client.get("/student/story/abcd")
        assert resp.status_code == 200
        assert resp.json()["story"]["title"] == seeded["story"].title
        assert resp.json()["has_taken_quiz"] is False
        assert db.query(StudentStoryView).count() == 1

        resp = client.get("/student/quiz/ABCD")
        quiz = resp.json()
        assert quiz["already_taken"] is False
        assert len(quiz["quiz_items"]) == 2
        assert "correct_answer" not in quiz["quiz_items"][0]

        resp = answer_all(client, seeded)
        assert resp.status_code == 200
        assert (resp.json()["score"], resp.json()["percentage"]) == (1, 50.0)

        resp = answer_all(client, seeded)
        assert resp.status_code == 409

        resp = client.get("/student/quiz/ABCD")
        assert resp.json() == {
            "success": True, "already_taken": True, "redirect_to": "/student/quiz/ABCD/results"
        }

        results = client.get("/student/quiz/ABCD/results").json()["results"]
        assert results["percentage"] == 50.0
        assert [a["is_correct"] for a in results["answers"]] == [True, False]

        library = client.get("/student/library").json()["stories"]
        assert [(s["code"], s["has_taken_quiz"]) for s in library] == [("ABCD", True)]

    def test_results_before_submitting(self, client, seeded):
        register(client)
        client.get("/student/story/ABCD")
        assert client.get("/student/quiz/ABCD/results").status_code == 404


class TestAccessGate:
    def test_no_cookie_redirects_to_info_form(self, client, seeded):
        resp = client.get("/student/story/abcd")
        assert resp.status_code == 401
        assert resp.json()["detail"]["redirect_to"] == "/student/info?code=ABCD"

    def test_missing_consent(self, client, seeded):
        register(client)
        client.cookies.delete(PRIVACY_CONSENT_COOKIE)
        assert client.get("/student/story/ABCD").status_code == 401

    def test_tampered_cookie(self, client, seeded):
        register(client)
        header, payload, signature = client.cookies.get(STUDENT_INFO_COOKIE).split(".")
        flipped = "A" if signature[10] != "A" else "B"
        client.cookies.clear()
        client.cookies.set(STUDENT_INFO_COOKIE, f"{header}.{payload}.{signature[:10]}{flipped}{signature[11:]}")
        client.cookies.set(PRIVACY_CONSENT_COOKIE, "true")
        assert client.get("/student/story/ABCD").status_code == 401

    def test_other_unviewed_code_is_refused(self, client, factory, seeded):
        other = factory.story(title="Ang Alamat ng Pinya")
        factory.code(other, "PINY")
        register(client)

        resp = client.get("/student/story/PINY")
        assert resp.status_code == 403
        detail = resp.json()["detail"]
        assert detail["countdown"] == 5
        assert detail["redirect_to"] == "/student/story/ABCD"

    def test_previously_viewed_story_stays_open(self, client, factory, seeded):
        other = factory.story(title="Ang Alamat ng Pinya")
        other_code = factory.code(other, "PINY", status=CodeStatus.inactive)
        factory.view(other_code, full_name="Juan", section="10-A", device_id="d1")
        register(client)

        assert client.get("/student/story/PINY").status_code == 200

    def test_inactive_authorized_code(self, client, db, seeded):
        register(client)
        seeded["code"].status = CodeStatus.inactive
        db.commit()
        assert client.get("/student/story/ABCD").status_code == 403

    def test_quiz_requires_a_view(self, client, seeded):
        register(client)
        assert client.get("/student/quiz/ABCD").status_code == 403
        assert answer_all(client, seeded).status_code == 403

    def test_results_need_a_view_from_this_device(self, client, seeded):
        register(client, device_id="d1")
        client.get("/student/story/ABCD")
        answer_all(client, seeded)

        other_device = TestClient(app)
        register(other_device, device_id="d2")
        assert other_device.get("/student/quiz/ABCD").status_code == 403

        resp = other_device.get("/student/quiz/ABCD/results")
        assert resp.status_code == 403
        assert resp.json()["detail"]["redirect_to"] == "/student/story/ABCD"

        assert client.get("/student/quiz/ABCD/results").status_code == 200

    def test_quiz_closed_for_inactive_code(self, client, db, seeded):
        register(client)
        client.get("/student/story/ABCD")
        seeded["code"].status = CodeStatus.inactive
        db.commit()
        assert client.get("/student/quiz/ABCD").status_code == 403

    def test_unknown_code(self, client, seeded):
        register(client)
        assert client.get("/student/story/NOPE").status_code == 404


class TestCookieRefresh:
    def test_student_requests_refresh_both_cookies(self, client, seeded):
        register(client)
        resp = client.get("/student/session")
        assert resp.cookies.get(STUDENT_INFO_COOKIE)
        assert resp.cookies.get(PRIVACY_CONSENT_COOKIE) == "true"

    def test_other_paths_are_left_alone(self, client, seeded):
        register(client)
        resp = client.get("/health")
        assert STUDENT_INFO_COOKIE not in resp.cookies
