import json

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from dashboard.actions.invoices import (
    ActionResult,
    create_invoice,
    delete_invoice,
    update_invoice,
)
from dashboard.actions.results import Redirect
from dashboard.config import settings
from dashboard.database import get_db
from dashboard.middleware.auth import get_current_user
from dashboard.models.customer import Customer
from dashboard.models.invoice import Invoice
from dashboard.schemas.auth import SessionUser
from dashboard.schemas.invoice import InvoiceListItem
from dashboard.services.cache import cache_page, get_cached_page

logger = structlog.get_logger()
router = APIRouter()


def _render(result: ActionResult) -> Response:
    if isinstance(result, Redirect):
        return RedirectResponse(result.location, status_code=status.HTTP_303_SEE_OTHER)
    code = 422 if result.errors else status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=code, content=result.model_dump(exclude_none=True))


@router.get("")
async def list_invoices(
    current_user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    cached = await get_cached_page(settings.INVOICES_PATH)
    if cached is not None:
        return Response(content=cached, media_type="application/json")

    result = await db.execute(
        select(
            Invoice.id,
            Invoice.customer_id,
            Customer.name,
            Customer.email,
            Customer.image_url,
            Invoice.amount,
            Invoice.status,
            Invoice.date,
        )
        .join(Customer, Customer.id == Invoice.customer_id)
        .order_by(Invoice.date.desc())
    )
    items = [
        InvoiceListItem(
            id=str(row.id),
            customer_id=str(row.customer_id),
            name=row.name,
            email=row.email,
            image_url=row.image_url,
            amount=row.amount,
            status=row.status,
            date=row.date.isoformat(),
        ).model_dump()
        for row in result.all()
    ]
    body = json.dumps({"data": items})
    await cache_page(settings.INVOICES_PATH, body)
    return Response(content=body, media_type="application/json")


@router.post("/create")
async def create_invoice_form(
    request: Request,
    current_user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    form = await request.form()
    return _render(await create_invoice(None, form, db=db))


@router.post("/{invoice_id}/edit")
async def update_invoice_form(
    invoice_id: str,
    request: Request,
    current_user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    form = await request.form()
    return _render(await update_invoice(invoice_id, None, form, db=db))


@router.post("/{invoice_id}/delete")
async def delete_invoice_form(
    invoice_id: str,
    current_user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_invoice(invoice_id, db=db)
    return RedirectResponse(settings.INVOICES_PATH, status_code=status.HTTP_303_SEE_OTHER)
