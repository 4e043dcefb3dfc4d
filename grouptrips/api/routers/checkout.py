"""Checkout endpoints: start a paid trip creation and handle the payment return."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status

from grouptrips.core.security import get_current_actor, get_optional_actor
from grouptrips.interfaces.http.deps import get_checkout_flow
from grouptrips.modules.checkout import CheckoutFlow, FlowOutcome
from grouptrips.modules.drafts import DraftValidationError, TripDraft
from grouptrips.modules.payments import PAYMENT_UNAVAILABLE_MESSAGE, PaymentGatewayError
from grouptrips.schemas import (
    CheckoutReturnResponse,
    CheckoutStartResponse,
    TokenData,
    TripDraftRequest,
    TripResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=CheckoutStartResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Stage a trip draft and start payment",
)
async def start_checkout(
    payload: TripDraftRequest,
    actor: TokenData = Depends(get_current_actor),
    flow: CheckoutFlow = Depends(get_checkout_flow),
) -> CheckoutStartResponse:
    try:
        draft = TripDraft.create(
            title=payload.title,
            start_at=payload.start_at,
            group_label=payload.group_label,
            description=payload.description,
            end_at=payload.end_at,
        )
        redirect = await flow.begin_checkout(draft, actor.actor_id, email=actor.email)
    except DraftValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(exc), "field": exc.field},
        ) from exc
    except PaymentGatewayError as exc:
        logger.error("Checkout for actor %s could not reach the payment gateway: %s", actor.actor_id, exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=PAYMENT_UNAVAILABLE_MESSAGE) from exc

    return CheckoutStartResponse(
        redirect_url=redirect.url,
        token_shape=redirect.token.shape.value,
        intent_id=redirect.intent_id,
    )


@router.get("/return", response_model=CheckoutReturnResponse, summary="Handle the return from the payment page")
async def checkout_return(
    request: Request,
    actor: Optional[TokenData] = Depends(get_optional_actor),
    flow: CheckoutFlow = Depends(get_checkout_flow),
) -> CheckoutReturnResponse:
    actor_id = actor.actor_id if actor else None
    signals = await flow.collect_signals(request.query_params, actor_id)
    outcome = await flow.on_mount(signals, actor_id)
    return _to_response(outcome, request)


def _to_response(outcome: FlowOutcome, request: Request) -> CheckoutReturnResponse:
    trip = TripResponse.model_validate(outcome.trip) if outcome.trip is not None else None
    return CheckoutReturnResponse(
        state=outcome.state.value,
        classification=outcome.classification.value,
        message=outcome.message,
        warning=outcome.warning,
        trip=trip,
        prefill=outcome.prefill,
        pending=outcome.pending,
        clear_signals=outcome.clear_signals,
        # tells the client to replace its URL so a reload does not replay the return
        location=request.url.path if outcome.clear_signals else None,
    )
