"""Dice table routes: create, roll, reskin and close a table."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict

from fastapi import APIRouter, Depends, Form, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from starlette.requests import Request

from tiny_dices.config import settings
from tiny_dices.dependencies import SessionRegistry, get_registry, get_table
from tiny_dices.dice import TooManyDiceError, limit_dice
from tiny_dices.rendering import HtmlFaceRenderer, templates
from tiny_dices.session import DiceSession

router = APIRouter()

Table = tuple[DiceSession, HtmlFaceRenderer]

_SKIN_SETTERS: dict[str, Callable[[DiceSession, object], None]] = {
    "bg": DiceSession.set_bg_skin,
    "text": DiceSession.set_text_skin,
    "border": DiceSession.set_border_skin,
    "selection_bg": DiceSession.set_selection_bg_skin,
    "selection_text": DiceSession.set_selection_text_skin,
}


@router.post("/tables")
async def create_table(registry: SessionRegistry = Depends(get_registry)) -> RedirectResponse:
    table_id = registry.create()
    return RedirectResponse(url=f"/tables/{table_id}", status_code=303)


@router.get("/tables/{table_id}", response_class=HTMLResponse)
async def table_page(
    table_id: str, request: Request, table: Table = Depends(get_table)
) -> HTMLResponse:
    """Show the table with its roll and skin forms and the current dice."""
    session, renderer = table
    return templates.TemplateResponse(
        request,
        "table.html",
        {
            "table_id": table_id,
            "skin": session.skin_snapshot(),
            "dice": renderer.dice,
        },
    )


@router.post("/tables/{table_id}/roll", response_class=HTMLResponse)
async def roll_table(
    request: Request,
    dice: str = Form(""),
    can_zero: bool = Form(False),
    roll_infinity: bool = Form(False),
    keep: bool = Form(False),
    table: Table = Depends(get_table),
) -> HTMLResponse:
    """Roll the submitted dice and return the refreshed dice area.

    With ``keep`` the new dice are added to the ones already on the table.
    """
    session, renderer = table
    try:
        bounds = limit_dice(session.parse_roll_config(dice), settings.max_dice_per_roll)
    except TooManyDiceError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if keep:
        session.roll_many(bounds, can_zero, roll_infinity)
    else:
        session.roll(bounds, can_zero, roll_infinity)
    return templates.TemplateResponse(request, "_dice_area.html", {"dice": renderer.dice})


@router.get("/tables/{table_id}/outcomes")
async def table_outcomes(table: Table = Depends(get_table)) -> JSONResponse:
    session, _ = table
    return JSONResponse({"outcomes": [asdict(o) for o in session.outcomes]})


@router.get("/tables/{table_id}/skin")
async def table_skin(table: Table = Depends(get_table)) -> JSONResponse:
    session, _ = table
    return JSONResponse(asdict(session.skin_snapshot()))


@router.post("/tables/{table_id}/skin")
async def update_skin(
    table_id: str, request: Request, table: Table = Depends(get_table)
) -> RedirectResponse:
    """Apply submitted skin fields and restyle the dice on the table.

    Only fields present in the form are touched. A blank field resets that
    slot to its default, and so does a value that fails validation.
    """
    session, _ = table
    form = await request.form()
    for name, setter in _SKIN_SETTERS.items():
        if name in form:
            setter(session, form[name] or None)
    if "bg_img" in form:
        force_unsafe = form.get("force_unsafe_img") == "true"
        session.set_bg_img(form["bg_img"] or None, force_unsafe=force_unsafe)
    session.restyle_all()
    return RedirectResponse(url=f"/tables/{table_id}", status_code=303)


@router.post("/tables/{table_id}/destroy")
async def destroy_table(
    table_id: str,
    table: Table = Depends(get_table),
    registry: SessionRegistry = Depends(get_registry),
) -> RedirectResponse:
    registry.discard(table_id)
    return RedirectResponse(url="/", status_code=303)
