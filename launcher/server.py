"""
LAUNCHER HTTP CHANNEL

Local method channel for the host UI. One endpoint per call:

  POST /channel/{method}   body = arguments object
    200 {"status": "success", "result": true|false}
    400 {"status": "error", "code": "INVALID_ARGUMENT", "message": ...}
    404 {"status": "not_implemented"}

The facade is request-scoped state free, so one instance serves every call.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI
from fastapi.responses import JSONResponse

from launcher.dispatch import DispatchFacade
from launcher.version import CURRENT_VERSION, get_version

logger = logging.getLogger("LAUNCHER.Server")

app = FastAPI(title="App Launcher Channel", version=CURRENT_VERSION)

_facade: Optional[DispatchFacade] = None


def get_facade() -> DispatchFacade:
    global _facade
    if _facade is None:
        from launcher.desktop_host import create_desktop_facade
        _facade = create_desktop_facade()
    return _facade


@app.get("/api/version")
def version():
    return get_version()


@app.post("/channel/{method}")
def call_method(
    method: str,
    arguments: Optional[Dict[str, Any]] = Body(default=None),
    facade: DispatchFacade = Depends(get_facade),
):
    result = facade.handle(method, arguments)
    if result.status == "error":
        return JSONResponse(status_code=400, content=result.to_dict())
    if result.status == "not_implemented":
        return JSONResponse(status_code=404, content=result.to_dict())
    return result.to_dict()
