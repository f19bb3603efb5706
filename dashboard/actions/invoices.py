"""
Invoice form actions: create, update, delete.

Each action validates the submission, issues a single statement on the
caller's session and commits it. Field errors and database failures come
back as an ``ActionState``; success revalidates the listing page and
returns a ``Redirect`` to it.
"""

from datetime import date as date_type, datetime, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy import delete, insert, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from dashboard.actions.results import ActionState, Redirect
from dashboard.config import settings
from dashboard.models.invoice import Invoice
from dashboard.schemas.invoice import InvoiceForm, flatten_field_errors
from dashboard.services.cache import revalidate_path

logger = structlog.get_logger()

ActionResult = Union[Redirect, ActionState]


class InvoiceDeleteError(Exception):
    pass


def today_iso() -> str:
    """Current UTC calendar day as YYYY-MM-DD."""
    return datetime.now(timezone.utc).isoformat().split("T")[0]


def _validate(form_data: Mapping[str, Any], message: str) -> Union[InvoiceForm, ActionState]:
    try:
        return InvoiceForm.from_form(form_data)
    except ValidationError as e:
        return ActionState(errors=flatten_field_errors(e), message=message)


async def create_invoice(
    prev_state: Optional[ActionState],
    form_data: Mapping[str, Any],
    *,
    db: AsyncSession,
) -> ActionResult:
    validated = _validate(form_data, "Missing Fields. Failed to Create Invoice.")
    if isinstance(validated, ActionState):
        return validated

    amount_in_cents = validated.amount_in_cents
    date = today_iso()

    try:
        await db.execute(
            insert(Invoice).values(
                customer_id=validated.customer_id,
                amount=amount_in_cents,
                status=validated.status,
                date=date_type.fromisoformat(date),
            )
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("invoice_create_failed", customer_id=validated.customer_id, error=str(e))
        return ActionState(message="Database error")

    logger.info("invoice_created", customer_id=validated.customer_id, amount=amount_in_cents)
    await revalidate_path(settings.INVOICES_PATH)
    return Redirect(settings.INVOICES_PATH)


async def update_invoice(
    invoice_id: str,
    prev_state: Optional[ActionState],
    form_data: Mapping[str, Any],
    *,
    db: AsyncSession,
) -> ActionResult:
    validated = _validate(form_data, "Missing Fields. Failed to Update Invoice.")
    if isinstance(validated, ActionState):
        return validated

    amount_in_cents = validated.amount_in_cents

    try:
        await db.execute(
            update(Invoice)
            .where(Invoice.id == invoice_id)
            .values(
                customer_id=validated.customer_id,
                amount=amount_in_cents,
                status=validated.status,
            )
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("invoice_update_failed", invoice_id=invoice_id, error=str(e))
        return ActionState(message="Database error: Faild to Update")

    logger.info("invoice_updated", invoice_id=invoice_id, amount=amount_in_cents)
    await revalidate_path(settings.INVOICES_PATH)
    return Redirect(settings.INVOICES_PATH)


async def delete_invoice(invoice_id: str, *, db: AsyncSession) -> None:
    # Deletion stays switched off until INVOICE_DELETE_ENABLED is set.
    if not settings.INVOICE_DELETE_ENABLED:
        raise InvoiceDeleteError("Faild to Delete")

    await db.execute(delete(Invoice).where(Invoice.id == invoice_id))
    await db.commit()
    logger.info("invoice_deleted", invoice_id=invoice_id)
    await revalidate_path(settings.INVOICES_PATH)
