import httpx
import pytest

from rollover.core.endpoints import Candidate, ResilientEndpointCaller, delete_candidates, update_candidates
from rollover.core.errors import ApiError
from tests.conftest import run


def test_falls_through_routing_failure(backend, http):
    backend.on("PATCH", "/x/1", 404, {"message": "Cannot PATCH /x/1"})
    backend.on("PUT", "/x/1", 200, {"success": True, "data": {"_id": "1"}})
    caller = ResilientEndpointCaller(http)

    result = run(caller.call([
        Candidate("PATCH", "/x/1", {"a": 1}),
        Candidate("PUT", "/x/1", {"a": 1}),
    ]))

    assert result == {"success": True, "data": {"_id": "1"}}
    assert [(m, p) for m, p, _ in backend.calls] == [("PATCH", "/x/1"), ("PUT", "/x/1")]
    assert backend.calls[1][2] == {"a": 1}


def test_method_not_allowed_is_a_routing_failure(backend, http):
    backend.on("PATCH", "/x/1", 405, {})
    backend.on("PUT", "/x/1", 200, {"ok": True})

    result = run(ResilientEndpointCaller(http).call(update_candidates("x", "1", {})[:2]))

    assert result == {"ok": True}


def test_validation_rejection_stops_immediately(backend, http):
    backend.on("PATCH", "/x/1", 422, {"message": "endDate must be after startDate"})
    backend.on("PUT", "/x/1", 200, {"ok": True})

    with pytest.raises(ApiError) as exc_info:
        run(ResilientEndpointCaller(http).call([
            Candidate("PATCH", "/x/1", {}),
            Candidate("PUT", "/x/1", {}),
        ]))

    assert exc_info.value.status_code == 422
    assert exc_info.value.message == "endDate must be after startDate"
    assert len(backend.calls) == 1


def test_server_error_is_not_masked(backend, http):
    backend.on("PATCH", "/x/1", 500, {"error": "database down"})

    with pytest.raises(ApiError) as exc_info:
        run(ResilientEndpointCaller(http).call(update_candidates("x", "1", {})))

    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "database down"
    assert len(backend.calls) == 1


def test_network_failure_is_not_masked(backend, http):
    backend.on("DELETE", "/class/7", error=httpx.ConnectError)

    with pytest.raises(ApiError) as exc_info:
        run(ResilientEndpointCaller(http).call(delete_candidates("class", "7")))

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    assert len(backend.calls) == 1


def test_exhausted_candidates_surface_last_error(backend, http):
    backend.on("DELETE", "/class/7", 404, {"message": "first"})
    backend.on("DELETE", "/class/delete/7", 405, {"message": "last"})

    with pytest.raises(ApiError) as exc_info:
        run(ResilientEndpointCaller(http).call(delete_candidates("class", "7")))

    assert exc_info.value.status_code == 405
    assert exc_info.value.path == "/class/delete/7"
    assert exc_info.value.message == "last"


def test_custom_routing_predicate(backend, http):
    backend.on("POST", "/a", 400, {})
    backend.on("POST", "/b", 201, {"ok": True})
    caller = ResilientEndpointCaller(http, routing_failure=lambda e: e.status_code in (400, 404))

    assert run(caller.call([Candidate("POST", "/a", {}), Candidate("POST", "/b", {})])) == {"ok": True}


def test_no_candidates(http):
    with pytest.raises(ValueError):
        run(ResilientEndpointCaller(http).call([]))


def test_update_candidate_order():
    assert [str(c) for c in update_candidates("session", "s1", {})] == [
        "PATCH /session/s1",
        "PUT /session/s1",
        "PATCH /session/update/s1",
        "PUT /session/update/s1",
    ]
