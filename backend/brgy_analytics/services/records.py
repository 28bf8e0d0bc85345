"""
Record Types

Validated, tagged views of raw store rows. Rows come from a document store
(camelCase keys) or from SQL tables (snake_case columns); both are accepted.

Malformed fields never fail a record:
- numbers that are missing, non-numeric, NaN or infinite become None
- dates that cannot be parsed become None
- status/gender values outside the known set become the UNKNOWN variant

Only rows that are not mappings at all are rejected, and those are counted
in DataQualityCounter.malformed_records.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Iterable, List, Optional, Type, TypeVar

import numpy as np
from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .snapshot import DataQuality

logger = logging.getLogger(__name__)


def _lenient_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.replace(",", "").replace("₱", "").strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if np.isfinite(number) else None


def _lenient_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            value = float(value)
        except OverflowError:
            return None
        if not np.isfinite(value):
            return None
        # JS timestamps are in milliseconds
        seconds = value / 1000.0 if value > 1e11 else float(value)
        try:
            parsed = datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _lenient_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _lenient_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value) if isinstance(value, (bool, int)) else False


def _lenient_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set)):
        return [str(v) for v in value if v is not None]
    return []


Number = Annotated[Optional[float], BeforeValidator(_lenient_number)]
Timestamp = Annotated[Optional[datetime], BeforeValidator(_lenient_datetime)]
Text = Annotated[Optional[str], BeforeValidator(_lenient_text)]
Flag = Annotated[bool, BeforeValidator(_lenient_bool)]
Labels = Annotated[List[str], BeforeValidator(_lenient_list)]


class _TaggedEnum(str, Enum):
    """String enum whose unrecognised values map to UNKNOWN."""

    @classmethod
    def parse(cls, value: Any):
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower() if value is not None else ""
        try:
            return cls(text)
        except ValueError:
            return cls("unknown")


class Gender(_TaggedEnum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"


class BookingStatus(_TaggedEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    UNKNOWN = "unknown"


class PaymentStatus(_TaggedEnum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    REFUNDED = "refunded"
    UNKNOWN = "unknown"


class ApplicationStatus(_TaggedEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    UNKNOWN = "unknown"


GenderField = Annotated[Gender, BeforeValidator(Gender.parse)]
BookingStatusField = Annotated[BookingStatus, BeforeValidator(BookingStatus.parse)]
PaymentStatusField = Annotated[PaymentStatus, BeforeValidator(PaymentStatus.parse)]
ApplicationStatusField = Annotated[ApplicationStatus, BeforeValidator(ApplicationStatus.parse)]


class RecordModel(BaseModel):
    """Base for store records: camelCase or snake_case input, immutable."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Booking(RecordModel):
    """Booking request made by a tenant for a listing."""
    id: Text = None
    property_id: Text = None
    tenant_id: Text = None
    owner_id: Text = None
    tenant_name: Text = None
    status: BookingStatusField = BookingStatus.UNKNOWN
    payment_status: PaymentStatusField = PaymentStatus.UNKNOWN
    tenant_type: Text = None
    number_of_people: Number = None
    monthly_rent: Number = None
    total_amount: Number = None
    created_at: Timestamp = None
    is_deleted: Flag = False

    @property
    def is_resident(self) -> bool:
        """Approved and fully paid: the tenant lives in the property."""
        return self.status == BookingStatus.APPROVED and self.payment_status == PaymentStatus.PAID


class Listing(RecordModel):
    """Published property listing."""
    id: Text = None
    user_id: Text = None
    title: Text = None
    barangay: Text = None
    availability_status: Optional[Any] = None
    property_type: Text = None
    monthly_rent: Number = None
    published_at: Timestamp = None
    created_at: Timestamp = None
    view_count: Number = Field(
        default=None,
        validation_alias=AliasChoices("viewCount", "view_count", "views"),
    )

    @property
    def listed_at(self) -> Optional[datetime]:
        return self.published_at or self.created_at


class User(RecordModel):
    """User account (tenant, owner or barangay official)."""
    id: Text = None
    name: Text = None
    gender: GenderField = Gender.UNKNOWN
    barangay: Text = None
    role: Text = None
    roles: Labels = Field(default_factory=list)
    created_at: Timestamp = None


class TenantProfile(RecordModel):
    """Tenant profile; the secondary gender source."""
    user_id: Text = None
    gender: GenderField = Gender.UNKNOWN


class OwnerApplication(RecordModel):
    """Application by a user to operate as a property owner in a barangay."""
    id: Text = None
    user_id: Text = None
    name: Text = None
    barangay: Text = None
    status: ApplicationStatusField = ApplicationStatus.UNKNOWN
    reviewed_at: Timestamp = None
    created_at: Timestamp = None


class ListingInquiry(RecordModel):
    """Inquiry sent by a tenant about a listing."""
    id: Text = None
    listing_id: Text = None
    tenant_id: Text = None
    created_at: Timestamp = None


class DataQualityCounter(DataQuality):
    """Running count of data problems seen while building one report."""
    model_config = ConfigDict(frozen=False)

    def to_model(self) -> DataQuality:
        """Frozen copy for the snapshot."""
        return DataQuality(**self.model_dump())


RecordT = TypeVar("RecordT", bound=RecordModel)


def parse_records(
    model: Type[RecordT],
    rows: Iterable[Any],
    collection: str,
    quality: Optional[DataQualityCounter] = None,
) -> List[RecordT]:
    """
    Validate raw rows into `model`, skipping rows that cannot be read.

    Args:
        model: Record type to build
        rows: Raw rows from the store
        collection: Collection name (for log messages)
        quality: Counter that receives one malformed_records per skipped row

    Returns:
        Parsed records in input order
    """
    parsed: List[RecordT] = []
    skipped = 0
    for row in rows or []:
        if not isinstance(row, dict):
            skipped += 1
            continue
        try:
            parsed.append(model.model_validate(row))
        except ValidationError as e:
            logger.debug(f"Skipping malformed {collection} row: {e}")
            skipped += 1
    if skipped:
        logger.warning(f"Skipped {skipped} malformed row(s) in '{collection}'")
        if quality is not None:
            quality.malformed_records += skipped
    return parsed
