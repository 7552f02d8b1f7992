from datetime import datetime
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from .errors import (
    AlreadyCompleteError,
    ComputationError,
    ConfirmationRequiredError,
    LadderBusyError,
    LadderError,
    LadderNotFoundError,
    LadderValidationError,
    PersistenceError,
)
from .models import Ladder, LadderStatus, Step
from .odds import format_currency
from .service import LadderService, ServiceStatus, get_ladder_service
from .state_machine import cashout_available, ladder_status, next_step, progress

router = APIRouter(prefix="/ladders", tags=["Ladders"])

ERROR_STATUS = {
    LadderValidationError: 400,
    LadderNotFoundError: 404,
    AlreadyCompleteError: 409,
    LadderBusyError: 409,
    ConfirmationRequiredError: 409,
    ComputationError: 422,
    PersistenceError: 503,
}


def get_service():
    return get_ladder_service()


def _http_error(e: LadderError) -> HTTPException:
    return HTTPException(status_code=ERROR_STATUS.get(type(e), 400), detail=str(e))


class CreateLadderRequest(BaseModel):
    """Raw form input; amounts may be typed with currency symbols ('$1,000')."""
    name: str
    start_stake: Union[str, float]
    goal_amount: Union[str, float]
    odds: str


class LadderView(BaseModel):
    id: str
    name: str
    odds: str
    start_stake: float
    goal_amount: float
    current_amount: float
    current_step_index: int
    total_steps: int
    status: LadderStatus
    cashout_available: bool
    progress: float
    next_step: Optional[Step] = None
    display: dict[str, str]
    ladder_steps: list[Step]
    last_updated: datetime
    created_at: datetime


class WinTapView(BaseModel):
    confirmed: bool
    state: str
    message: str
    ladder: LadderView


class MessageResponse(BaseModel):
    message: str


def to_view(ladder: Ladder) -> LadderView:
    return LadderView(
        id=ladder.id,
        name=ladder.name,
        odds=ladder.odds,
        start_stake=ladder.start_stake,
        goal_amount=ladder.goal_amount,
        current_amount=ladder.current_amount,
        current_step_index=ladder.current_step_index,
        total_steps=ladder.total_steps,
        status=ladder_status(ladder),
        cashout_available=cashout_available(ladder),
        progress=round(progress(ladder), 4),
        next_step=next_step(ladder),
        display={
            "current_amount": format_currency(ladder.current_amount),
            "goal_amount": format_currency(ladder.goal_amount),
            "start_stake": format_currency(ladder.start_stake),
        },
        ladder_steps=list(ladder.ladder_steps),
        last_updated=ladder.last_updated,
        created_at=ladder.created_at
    )


@router.get("", response_model=list[LadderView])
def list_ladders(service: LadderService = Depends(get_service)):
    try:
        return [to_view(ladder) for ladder in service.list_ladders()]
    except LadderError as e:
        raise _http_error(e)


@router.post("", response_model=LadderView, status_code=201)
def create_ladder(request: CreateLadderRequest, service: LadderService = Depends(get_service)):
    try:
        ladder = service.create_ladder(request.name, request.start_stake, request.goal_amount, request.odds)
    except LadderError as e:
        raise _http_error(e)
    return to_view(ladder)


@router.get("/status", response_model=ServiceStatus)
def get_status(service: LadderService = Depends(get_service)):
    """Status message, selection and pending confirmations for the UI."""
    return service.status()


@router.post("/active/win", response_model=WinTapView)
def tap_win(service: LadderService = Depends(get_service)):
    """
    Double-tap WIN on the selected ladder.
    The first call arms the confirmation, a second call within the timeout applies it.
    """
    try:
        result = service.tap_win()
    except LadderError as e:
        raise _http_error(e)
    return WinTapView(
        confirmed=result.confirmed,
        state=result.state.value,
        message=result.message,
        ladder=to_view(result.ladder)
    )


@router.post("/active/delete", response_model=MessageResponse)
def request_delete(service: LadderService = Depends(get_service)):
    try:
        service.request_delete()
    except LadderError as e:
        raise _http_error(e)
    return {"message": service.message}


@router.post("/active/delete/confirm", response_model=MessageResponse)
def confirm_delete(service: LadderService = Depends(get_service)):
    try:
        service.confirm_delete()
    except LadderError as e:
        raise _http_error(e)
    return {"message": service.message}


@router.post("/active/delete/cancel", response_model=MessageResponse)
def cancel_delete(service: LadderService = Depends(get_service)):
    service.cancel_delete()
    return {"message": service.message}


@router.get("/{ladder_id}", response_model=LadderView)
def get_ladder(ladder_id: str, service: LadderService = Depends(get_service)):
    try:
        return to_view(service.get_ladder(ladder_id))
    except LadderError as e:
        raise _http_error(e)


@router.post("/{ladder_id}/select", response_model=ServiceStatus)
def select_ladder(ladder_id: str, service: LadderService = Depends(get_service)):
    try:
        service.select_ladder(ladder_id)
    except LadderError as e:
        raise _http_error(e)
    return service.status()


@router.post("/{ladder_id}/loss", response_model=LadderView)
def report_loss(ladder_id: str, service: LadderService = Depends(get_service)):
    try:
        ladder = service.apply_loss(ladder_id)
    except LadderError as e:
        raise _http_error(e)
    return to_view(ladder)


@router.delete("/{ladder_id}", response_model=MessageResponse)
def delete_ladder(ladder_id: str, service: LadderService = Depends(get_service)):
    try:
        service.delete_ladder(ladder_id)
    except LadderError as e:
        raise _http_error(e)
    return {"message": service.message}
