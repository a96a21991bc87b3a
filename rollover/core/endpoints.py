# rollover/core/endpoints.py
"""
Mutation submission against routes whose exact shape is not uniform.

The backend does not expose one update/delete convention for every resource
(`PATCH /session/{id}` on one deployment, `PUT /session/update/{id}` on
another). Each mutating call is therefore written as an ordered list of
candidate (verb, path, body) guesses. A candidate that answers 404 or 405 is
treated as "this route does not exist here" and the next one is tried. Any
other failure is a real answer from the server and is raised as-is.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from rollover.core.errors import ApiError
from rollover.core.http import CoreHTTP
from rollover.core.logging import log


@dataclass(frozen=True)
class Candidate:
    method: str
    path: str
    body: Optional[dict] = None

    def __str__(self) -> str:
        return f"{self.method.upper()} {self.path}"


def is_routing_failure(error: ApiError) -> bool:
    return error.is_routing_failure


def update_candidates(resource: str, entity_id: str, body: dict) -> list[Candidate]:
    """Standard update guesses, most specific REST shape first."""
    return [
        Candidate("PATCH", f"/{resource}/{entity_id}", body),
        Candidate("PUT", f"/{resource}/{entity_id}", body),
        Candidate("PATCH", f"/{resource}/update/{entity_id}", body),
        Candidate("PUT", f"/{resource}/update/{entity_id}", body),
    ]


def delete_candidates(resource: str, entity_id: str) -> list[Candidate]:
    return [
        Candidate("DELETE", f"/{resource}/{entity_id}"),
        Candidate("DELETE", f"/{resource}/delete/{entity_id}"),
    ]


class ResilientEndpointCaller:
    def __init__(self, http: CoreHTTP, routing_failure: Callable[[ApiError], bool] = is_routing_failure):
        self.http = http
        self.routing_failure = routing_failure

    async def call(self, candidates: Iterable[Candidate]) -> Any:
        """
        Try each candidate in order and return the first successful response body.

        Raises:
            ApiError: the first non-routing failure, or the last routing failure
                once every candidate has been exhausted.
            ValueError: when no candidates are given.
        """
        last_error: Optional[ApiError] = None
        for attempt, candidate in enumerate(candidates, start=1):
            try:
                return await self.http.request(candidate.method, candidate.path, candidate.body)
            except ApiError as e:
                if not self.routing_failure(e):
                    log.warning("endpoint_rejected", candidate=str(candidate), attempt=attempt, status_code=e.status_code)
                    raise
                log.info("endpoint_fallthrough", candidate=str(candidate), attempt=attempt, status_code=e.status_code)
                last_error = e

        if last_error is None:
            raise ValueError("No endpoint candidates given")
        log.warning("endpoint_candidates_exhausted", path=last_error.path, status_code=last_error.status_code)
        raise last_error
