from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

INVOICE_STATUSES = ("pending", "paid")

CUSTOMER_REQUIRED = "Please select a customer"
AMOUNT_NOT_POSITIVE = "Amount must be greater than 0"
STATUS_INVALID = "Please select a valid status"
AMOUNT_TOO_LARGE = "Amount is too large"

# invoices.amount is a 32-bit INTEGER of cents
MAX_AMOUNT_CENTS = 2_147_483_647
MAX_AMOUNT = Decimal(MAX_AMOUNT_CENTS) / 100

FORM_FIELDS = ("customerId", "amount", "status")


def _amount_error() -> PydanticCustomError:
    return PydanticCustomError("amount_not_positive", AMOUNT_NOT_POSITIVE)


def to_cents(amount: Decimal) -> int:
    """Major units to integer minor units, rounding half-up on the cent."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class InvoiceForm(BaseModel):
    """Submitted invoice fields shared by the create and update forms."""

    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(..., alias="customerId")
    amount: Decimal
    status: Literal["pending", "paid"]

    @field_validator("customer_id", mode="before")
    @classmethod
    def require_customer(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise PydanticCustomError("customer_required", CUSTOMER_REQUIRED)
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Decimal:
        # Blank and absent values coerce to zero and fail the positivity check.
        if v is None or (isinstance(v, str) and not v.strip()):
            return Decimal(0)
        if isinstance(v, bool):
            return Decimal(int(v))
        try:
            amount = Decimal(str(v).strip())
        except InvalidOperation:
            raise _amount_error()
        if not amount.is_finite():
            raise _amount_error()
        return amount

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise _amount_error()
        # Checked before to_cents, which cannot quantize values this large.
        if v > MAX_AMOUNT:
            raise PydanticCustomError("amount_too_large", AMOUNT_TOO_LARGE)
        if to_cents(v) <= 0:
            raise _amount_error()
        return v

    @field_validator("status", mode="before")
    @classmethod
    def known_status(cls, v: Any) -> str:
        if v not in INVOICE_STATUSES:
            raise PydanticCustomError("status_invalid", STATUS_INVALID)
        return v

    @property
    def amount_in_cents(self) -> int:
        return to_cents(self.amount)

    @classmethod
    def from_form(cls, form_data: Mapping[str, Any]) -> "InvoiceForm":
        """Validate a form submission; absent fields are read as None. Raises ValidationError."""
        return cls.model_validate({name: form_data.get(name) for name in FORM_FIELDS})


def flatten_field_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """Collapse a ValidationError into {field: [message, ...]} keyed by form field name."""
    field_errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "__root__"
        field_errors.setdefault(field, []).append(err["msg"])
    return field_errors


class InvoiceListItem(BaseModel):
    id: str
    customer_id: str
    name: str
    email: str
    image_url: str
    amount: int
    status: str
    date: str

    model_config = {"from_attributes": True}
