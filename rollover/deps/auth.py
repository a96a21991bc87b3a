from typing import AsyncIterator, Optional

from fastapi import Depends, Header, HTTPException

from rollover.core.http import CoreHTTP

def parse_bearer(auth_header: Optional[str]) -> str:
    if not auth_header:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    if not auth_header.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Malformed Authorization header")
    token = auth_header.split(" ", 1)[1].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Malformed Authorization header")
    return token

async def get_bearer(authorization: Optional[str] = Header(None)) -> str:
    return parse_bearer(authorization)

async def get_core_http(token: str = Depends(get_bearer)) -> AsyncIterator[CoreHTTP]:
    """One backend client per request, carrying the caller's token."""
    http = CoreHTTP(token=token)
    try:
        yield http
    finally:
        await http.aclose()
