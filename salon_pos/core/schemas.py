from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from ..errors import ValidationFailed


def _normalize_timestamp(value: Optional[str]) -> Optional[str]:
    # stored the way SQLite's datetime() prints it so date() filters match
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).strip())
    except ValueError:
        raise ValueError("expected a timestamp like YYYY-MM-DD HH:MM")
    return parsed.replace(tzinfo=None).strftime("%Y-%m-%d %H:%M:%S")


# ====== Catalog ======
class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    category: str = Field(..., min_length=1)
    show_on_home: bool = False
    active: bool = True


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = Field(default=None, min_length=1)
    show_on_home: Optional[bool] = None
    active: Optional[bool] = None


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    display_order: int = 0


# ====== Customers ======
class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None


# ====== Staff ======
class StaffCreate(BaseModel):
    name: str = Field(..., min_length=1)
    commission_rate: float = Field(default=0, ge=0)
    role: Literal["staff", "admin"] = "staff"
    pin: Optional[str] = None
    photo_path: Optional[str] = None


class StaffUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    commission_rate: Optional[float] = Field(default=None, ge=0)
    active: Optional[bool] = None
    role: Optional[Literal["staff", "admin"]] = None
    photo_path: Optional[str] = None


# ====== Bills ======
class BillItemIn(BaseModel):
    service_id: Optional[int] = None
    service_name: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    quantity: int = Field(default=1, ge=1)
    staff_id: Optional[int] = None
    staff_name: Optional[str] = None
    notes: Optional[str] = None


class BillCreate(BaseModel):
    items: List[BillItemIn] = Field(..., min_length=1)
    customer_id: Optional[int] = None
    discount_amount: float = Field(default=0, ge=0)
    discount_type: Optional[Literal["fixed", "percent"]] = None
    # percent discounts may send the rate instead of the amount
    discount_value: Optional[float] = Field(default=None, ge=0, le=100)
    payment_method: str = Field(default="cash", min_length=1)
    payment_status: str = "completed"
    notes: Optional[str] = None


class BillQuery(BaseModel):
    limit: int = Field(default=50, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)
    # the touch UI sends startDate/endDate
    start_date: Optional[date] = Field(default=None, validation_alias=AliasChoices("start_date", "startDate"))
    end_date: Optional[date] = Field(default=None, validation_alias=AliasChoices("end_date", "endDate"))


# ====== Reservations ======
class ReservationCreate(BaseModel):
    start_time: str
    end_time: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    staff_id: Optional[int] = None
    service_name: Optional[str] = None
    status: Literal["scheduled", "confirmed", "completed", "cancelled"] = "scheduled"
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _timestamps(cls, v):
        return _normalize_timestamp(v)


class ReservationUpdate(BaseModel):
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    staff_id: Optional[int] = None
    service_name: Optional[str] = None
    status: Optional[Literal["scheduled", "confirmed", "completed", "cancelled"]] = None
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _timestamps(cls, v):
        return _normalize_timestamp(v)


def parse_payload(model, data):
    """Validate a bridge payload, turning pydantic errors into one readable line."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data if data is not None else {})
    except ValidationError as exc:
        parts = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ())) or "payload"
            parts.append(f"{loc}: {err.get('msg')}")
        raise ValidationFailed("; ".join(parts)) from exc


def parse_day(value) -> str:
    """Accept a date/datetime or ``YYYY-MM-DD`` and return the ISO date string."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(str(value).strip()[:10]).isoformat()
    except (TypeError, ValueError):
        raise ValidationFailed(f"invalid date: {value!r} (expected YYYY-MM-DD)")
