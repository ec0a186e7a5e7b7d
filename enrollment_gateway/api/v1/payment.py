"""POST /services/training/accelerator/payment - enrollment payment and invoice intake"""

import time
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.responses import Response

from enrollment_gateway.api.v1.schemas import ErrorResponse, PaymentResponse
from enrollment_gateway.api.dependencies import get_payment_handler, get_request_id
from enrollment_gateway.domain.exceptions import (
    DependencyError,
    EnrollmentError,
    GatewayDeclinedError,
    ReconciliationRequiredError,
    UnhandledError,
    ValidationError,
)
from enrollment_gateway.infrastructure.observability.logging import log_enrollment
from enrollment_gateway.services.payment_handler import EnrollmentPaymentHandler

router = APIRouter()

PAYMENT_PATH = "/services/training/accelerator/payment"
GENERIC_FAILURE_MESSAGE = "Payment processing failed. Please try again."


def error_response(error: EnrollmentError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_body())


@router.options(PAYMENT_PATH, status_code=204)
def payment_preflight() -> Response:
    """CORS preflight: empty 204, headers added by middleware"""
    return Response(status_code=204)


@router.post(
    PAYMENT_PATH,
    response_model=PaymentResponse,
    response_model_exclude_none=True,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def submit_payment(
    request: Request,
    handler: EnrollmentPaymentHandler = Depends(get_payment_handler),
):
    """
    Charge a card or record an invoice request for an existing application.

    Body is a flat payment object or {"payment": {...}}. All failures are
    returned as {"error": ...}; internal detail is only logged.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        body = await request.json()
    except ValueError:
        return error_response(ValidationError("body", "Request body must be valid JSON."))

    try:
        outcome = await run_in_threadpool(handler.submit, body, request_id)

    except ReconciliationRequiredError as e:
        # Already logged at CRITICAL by the handler
        return error_response(e)

    except DependencyError as e:
        logging.error(f"Dependency failure: {e}", exc_info=e, extra={"request_id": request_id})
        return JSONResponse(status_code=e.status_code, content={"error": GENERIC_FAILURE_MESSAGE})

    except GatewayDeclinedError as e:
        logging.warning(f"Payment declined: {e.message} ({e.details})", extra={"request_id": request_id})
        return error_response(e)

    except EnrollmentError as e:
        logging.warning(f"Request rejected: {e.message}", extra={"request_id": request_id})
        return error_response(e)

    except Exception as e:
        logging.error(f"Unexpected error: {e}", exc_info=e, extra={"request_id": request_id})
        return error_response(UnhandledError(GENERIC_FAILURE_MESSAGE))

    duration_ms = (time.time() - start_time) * 1000
    log_enrollment(
        request_id,
        outcome.applicant,
        outcome.payment_method,
        outcome.outcome,
        outcome.total_cents,
        duration_ms,
    )

    return outcome.to_body()

