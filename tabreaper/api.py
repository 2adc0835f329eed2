"""
FastAPI transport for a TabReaper instance.
"""

from typing import Any, Optional

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .errors import TabReaperError
from .service import TabReaper
from .spi.tab_provider import Tab
from .tracker import TabActivated, TabCreated, TabRemoved


class SettingsRequest(BaseModel):
    maxAgeDays: Any = None


class TabCreatedRequest(BaseModel):
    id: int
    url: Optional[str] = None
    pinned: bool = False
    active: bool = False
    title: str = ""
    favIconUrl: Optional[str] = None


class TabIdRequest(BaseModel):
    tabId: int


ERROR_STATUS = {
    "INVALID_SETTINGS": 400,
    "STORE_UNAVAILABLE": 503,
}


def create_app(reaper: TabReaper) -> FastAPI:
    app = FastAPI(title="tabreaper")

    @app.exception_handler(TabReaperError)
    async def _reaper_error_handler(_, exc: TabReaperError):
        status = ERROR_STATUS.get(exc.code, 400)
        return JSONResponse(
            status_code=status,
            content={
                "error": {
                    "code": exc.code,
                    "message": exc.message,
                    "details": exc.details,
                }
            },
        )

    @app.get("/v1/tabs")
    def list_tabs(q: Optional[str] = None):
        rows, settings = reaper.list_tabs(query=q)
        return {
            "tabs": [row.to_dict() for row in rows],
            "settings": settings.to_dict(),
        }

    @app.get("/v1/settings")
    def get_settings():
        return reaper.settings().to_dict()

    @app.put("/v1/settings")
    def put_settings(req: SettingsRequest):
        return reaper.set_max_age_days(req.maxAgeDays).to_dict()

    @app.post("/v1/sweep")
    def sweep():
        result = reaper.sweep_now()
        if result is None:
            return {"skipped": True, "closed": [], "purged": [], "failed": []}
        return {"skipped": False, **result.to_dict()}

    @app.get("/v1/at-risk")
    def at_risk(window_minutes: float = Query(60.0, gt=0)):
        return {"count": reaper.estimate_at_risk(window_minutes)}

    @app.post("/v1/events/created")
    def tab_created(req: TabCreatedRequest):
        tab = Tab(
            id=req.id,
            url=req.url,
            pinned=req.pinned,
            active=req.active,
            title=req.title,
            fav_icon_url=req.favIconUrl,
        )
        reaper.submit(TabCreated(tab))
        return {"ok": True}

    @app.post("/v1/events/activated")
    def tab_activated(req: TabIdRequest):
        reaper.submit(TabActivated(req.tabId))
        return {"ok": True}

    @app.post("/v1/events/removed")
    def tab_removed(req: TabIdRequest):
        reaper.submit(TabRemoved(req.tabId))
        return {"ok": True}

    return app
