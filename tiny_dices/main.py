from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from starlette.requests import Request

from tiny_dices.dependencies import get_registry
from tiny_dices.routers import pages, tables
from tiny_dices.session import InstanceDestroyedError


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    yield
    get_registry().clear()


app = FastAPI(title="Tiny Dices", lifespan=lifespan)

app.include_router(pages.router)
app.include_router(tables.router)


@app.exception_handler(InstanceDestroyedError)
async def destroyed_handler(request: Request, exc: InstanceDestroyedError) -> JSONResponse:
    return JSONResponse({"detail": str(exc)}, status_code=409)
