"""Pydantic schemas for API responses"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentResponse(BaseModel):
    """Response for an accepted payment or invoice request"""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    enrolled: bool
    payment_id: Optional[str] = Field(default=None, alias="paymentId")
    pending_payment: Optional[bool] = Field(default=None, alias="pendingPayment")


class ErrorResponse(BaseModel):
    """Response for rejected requests; some errors add detail fields"""

    model_config = ConfigDict(extra="allow")

    error: str
