"""Dependency injection for FastAPI endpoints

Clients that hold no per-request state are built once per process and shared.
"""

from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from enrollment_gateway.config import settings
from enrollment_gateway.domain.catalog import load_catalog
from enrollment_gateway.domain.models import TierCatalog
from enrollment_gateway.infrastructure.clients.mail import MailClient
from enrollment_gateway.infrastructure.clients.payment_gateway import StripePaymentGateway
from enrollment_gateway.infrastructure.database.repositories import EnrollmentStore
from enrollment_gateway.infrastructure.database.session import get_db
from enrollment_gateway.infrastructure.documents.invoice_pdf import InvoiceRenderer
from enrollment_gateway.infrastructure.documents.templates import TemplateStore
from enrollment_gateway.services.notifications import EnrollmentNotifier
from enrollment_gateway.services.payment_handler import EnrollmentPaymentHandler


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


@lru_cache
def get_catalog() -> TierCatalog:
    """Provide the configured tier catalog"""
    return load_catalog(settings.tier_catalog, settings.support_hourly_rate_cents)


@lru_cache
def get_payment_gateway() -> StripePaymentGateway:
    """Provide Stripe gateway client instance"""
    return StripePaymentGateway()


@lru_cache
def get_mail_client() -> MailClient:
    """Provide SMTP mail client instance"""
    return MailClient()


@lru_cache
def get_invoice_renderer() -> InvoiceRenderer:
    return InvoiceRenderer()


@lru_cache
def get_template_store() -> TemplateStore:
    return TemplateStore()


def get_store(db: Session = Depends(get_db)) -> EnrollmentStore:
    """Provide the enrollment store bound to this request's session"""
    return EnrollmentStore(db)


def get_notifier(
    store: EnrollmentStore = Depends(get_store),
    renderer: InvoiceRenderer = Depends(get_invoice_renderer),
    templates: TemplateStore = Depends(get_template_store),
    mail_client: MailClient = Depends(get_mail_client),
    catalog: TierCatalog = Depends(get_catalog),
) -> EnrollmentNotifier:
    return EnrollmentNotifier(store, renderer, templates, mail_client, catalog)


def get_payment_handler(
    store: EnrollmentStore = Depends(get_store),
    gateway: StripePaymentGateway = Depends(get_payment_gateway),
    notifier: EnrollmentNotifier = Depends(get_notifier),
    catalog: TierCatalog = Depends(get_catalog),
) -> EnrollmentPaymentHandler:
    """Provide the payment handler wired to this request's collaborators"""
    return EnrollmentPaymentHandler(store, gateway, notifier, catalog)
