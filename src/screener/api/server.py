"""
FastAPI server exposing single-symbol lookups and the screen.
Routes stay thin: lookups and screening live in screener.core.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from screener.app import ScreenerServices, build_services
from screener.core.errors import InvalidRequestError, ProviderError
from screener.core.models import FilterSpec

logger = logging.getLogger(__name__)


class ScreenRequest(BaseModel):
    type: str = Field(..., description="Screen type: swing or growth")
    filters: FilterSpec = Field(default_factory=FilterSpec)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _services(request: Request) -> ScreenerServices:
    return request.app.state.services


def create_app(services: Optional[ScreenerServices] = None) -> FastAPI:
    app = FastAPI(title="Stock Screener API", version="0.1.0")
    app.state.services = services or build_services()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/quote/{symbol}")
    async def get_quote(symbol: str, request: Request):
        """Current quote for one symbol."""
        try:
            quote = await _services(request).lookups.get_quote(symbol)
        except InvalidRequestError as e:
            return _error(400, e.message)
        except ProviderError as e:
            logger.error("Error fetching quote: %s", e)
            return _error(500, "Failed to fetch quote")
        if quote is None:
            return _error(404, "Symbol not found")
        return quote.model_dump(mode="json", by_alias=True)

    @app.get("/api/technicals/{symbol}")
    async def get_technicals(symbol: str, request: Request):
        """RSI and moving-average distances from the full daily history."""
        try:
            technicals = await _services(request).lookups.get_technicals(symbol)
        except InvalidRequestError as e:
            return _error(400, e.message)
        except ProviderError as e:
            logger.error("Error fetching technicals: %s", e)
            return _error(500, "Failed to fetch technical data")
        if technicals is None:
            return _error(404, "Technical data not found")
        return technicals.model_dump(mode="json", by_alias=True)

    @app.get("/api/overview/{symbol}")
    async def get_overview(symbol: str, request: Request):
        try:
            profile = await _services(request).lookups.get_overview(symbol)
        except InvalidRequestError as e:
            return _error(400, e.message)
        except ProviderError as e:
            logger.error("Error fetching overview: %s", e)
            return _error(500, "Failed to fetch overview")
        if profile is None:
            return _error(404, "Company not found")
        return profile.model_dump(mode="json", by_alias=True)

    @app.post("/api/screen")
    async def screen(body: ScreenRequest, request: Request):
        """Run a rate-limited screen; each provider call waits for its slot."""
        try:
            result = await _services(request).screening.screen(body.type, body.filters)
        except InvalidRequestError as e:
            return _error(400, e.message)
        except Exception:
            logger.exception("Error in screening")
            return _error(500, "Screening failed")
        return result.model_dump(mode="json", by_alias=True)

    @app.get("/health")
    async def health():
        return {"status": "OK", "message": "Stock Screener API is running"}

    return app
