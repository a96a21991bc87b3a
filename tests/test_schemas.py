from rollover.schemas.class_schema import ClassOut
from rollover.schemas.common import Page, normalize_id, unwrap_record
from rollover.schemas.session import SessionOut
from rollover.schemas.student import StudentOut
from rollover.schemas.transition import SessionTransitionRequest, TransitionUpdateIn


def test_normalize_id_forms():
    assert normalize_id(" abc ") == "abc"
    assert normalize_id({"_id": "abc"}) == "abc"
    assert normalize_id({"id": "abc"}) == "abc"
    assert normalize_id({"$oid": "abc"}) == "abc"
    assert normalize_id({"_id": {"$oid": "abc"}}) == "abc"
    assert normalize_id(None) == ""
    assert normalize_id(42) == ""


def test_student_from_api_record():
    student = StudentOut.model_validate({
        "_id": {"$oid": "s1"},
        "firstName": " Asha ",
        "scholarNumber": "SCH-11",
        "parentName": "Ravi",
        "number": "9876543210",
        "class": {"_id": "c9", "name": "9"},
        "session": "sess-1",
        "status": "INACTIVE",
    })

    assert student.id == "s1"
    assert student.name == "Asha"
    assert student.phone_number == "9876543210"
    assert student.class_id == "c9"
    assert student.session_id == "sess-1"
    assert not student.is_active
    assert student.in_session("sess-1")
    assert not student.in_session("")


def test_class_labels():
    assert ClassOut.model_validate({"_id": "1", "name": "10", "section": ["A"]}).label == "10-A"
    assert ClassOut.model_validate({"_id": "2", "name": "LKG"}).label == "LKG"
    assert ClassOut.model_validate({"_id": "3"}).label == "-"


def test_session_labels():
    assert SessionOut.model_validate({"_id": "1", "name": "Session", "startDate": "2026-04-01T00:00:00.000Z"}).label == "Session (2026)"
    assert SessionOut.model_validate({"_id": "2", "name": "Next", "startDate": "not a date"}).label == "Next"
    assert SessionOut.model_validate({"_id": "3"}).label == "Session"


def test_page_envelope():
    page = Page[ClassOut].model_validate({"data": [{"_id": "1", "name": "9"}, "junk"], "totalPages": None})
    assert [c.id for c in page.items] == ["1"]
    assert page.total_pages == 1


def test_unwrap_record():
    assert unwrap_record({"data": None}) is None
    assert unwrap_record({"data": {"_id": "1"}}) == {"_id": "1"}
    assert unwrap_record({"_id": "1"}) == {"_id": "1"}
    assert unwrap_record([]) is None


def test_transition_wire_shape():
    request = SessionTransitionRequest(
        session_id="s2",
        source_class_id="c9",
        updates=[
            TransitionUpdateIn(student_id="a", action="promote", target_class_id="c10"),
            TransitionUpdateIn(student_id="b", action="transfer"),
        ],
    )

    assert request.to_wire() == {
        "sessionId": "s2",
        "sourceClassId": "c9",
        "updates": [
            {"studentId": "a", "action": "promote", "targetClassId": "c10"},
            {"studentId": "b", "action": "transfer"},
        ],
    }
