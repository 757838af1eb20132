"""Landing page and stateless rolls."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.requests import Request

from tiny_dices.config import settings
from tiny_dices.dice import TooManyDiceError, limit_dice, parse_roll_config
from tiny_dices.faces import roll_outcome
from tiny_dices.rendering import templates

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def index(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "index.html")


@router.get("/roll")
async def quick_roll(dice: str = "", can_zero: bool = False) -> JSONResponse:
    """Roll comma-separated dice without creating a table."""
    try:
        bounds = limit_dice(parse_roll_config(dice), settings.max_dice_per_roll)
    except TooManyDiceError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    outcomes = [roll_outcome(bound, can_zero) for bound in bounds]
    return JSONResponse({"dice": bounds, "outcomes": [asdict(o) for o in outcomes]})
