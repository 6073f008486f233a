from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_MONTH_LOOKUP = {name.lower(): name for name in MONTH_NAMES}
_MONTH_LOOKUP.update({name[:3].lower(): name for name in MONTH_NAMES})

Identifier = Union[int, str]


class RecordModel(BaseModel):
    """Base for records read from storage: snake_case or camelCase input, camelCase output."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ResultModel(BaseModel):
    """Base for derived, never persisted values."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class FinancialPeriod(RecordModel):
    restaurant_id: Optional[Identifier] = None
    month: Optional[str] = None
    week_number: Optional[int] = Field(default=None, ge=1, le=53)
    year: int
    revenue: float = Field(default=0, ge=0)
    food_cost: float = Field(default=0, ge=0)
    labour_cost: float = Field(default=0, ge=0)
    energy_cost: float = Field(default=0, ge=0)
    rent_cost: float = Field(default=0, ge=0)
    marketing_cost: float = Field(default=0, ge=0)
    supplies_cost: float = Field(default=0, ge=0)
    technology_cost: float = Field(default=0, ge=0)
    waste_cost: float = Field(default=0, ge=0)
    delivery_revenue: float = Field(default=0, ge=0)
    dine_in_revenue: float = Field(default=0, ge=0)
    takeaway_revenue: float = Field(default=0, ge=0)
    total_covers: int = Field(default=0, ge=0)
    avg_ticket_size: float = Field(default=0, ge=0)
    repeat_customer_rate: float = Field(default=0, ge=0)

    @field_validator("month", mode="before")
    @classmethod
    def _normalize_month(cls, value: object) -> Optional[str]:
        if value is None:
            return None
        key = str(value).strip().lower()
        if key not in _MONTH_LOOKUP:
            raise ValueError(f"Unknown month name: {value!r}")
        return _MONTH_LOOKUP[key]

    @property
    def month_index(self) -> Optional[int]:
        """Calendar index 0-11, or None for weekly records."""
        if self.month is None:
            return None
        return MONTH_NAMES.index(self.month)

    @property
    def total_costs(self) -> float:
        return (
            self.food_cost
            + self.labour_cost
            + self.energy_cost
            + self.rent_cost
            + self.marketing_cost
            + self.supplies_cost
            + self.technology_cost
            + self.waste_cost
        )


class MenuItem(RecordModel):
    id: Identifier
    name: str = ""
    category: Optional[str] = None
    selling_price: float = Field(default=0, ge=0)
    computed_cost: Optional[float] = Field(default=None, ge=0)
    is_active: bool = True


class RecipeLine(RecordModel):
    ingredient_id: Identifier
    quantity: float = Field(..., ge=0)
    unit: Optional[str] = None


class IngredientPrice(RecordModel):
    id: Identifier
    name: Optional[str] = None
    current_price: float = Field(default=0, ge=0)


class SupplierPriceReport(RecordModel):
    restaurant_id: Identifier
    franchise_group_id: Optional[Identifier] = None
    ingredient_name: str
    supplier_name: str
    unit_price: float = Field(..., ge=0)
    unit: str
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = None
    reported_at: datetime


class ApprovedSupplier(RecordModel):
    """Supplier the franchisor has approved (or mandated) for the group."""

    id: Optional[Identifier] = None
    franchise_group_id: Optional[Identifier] = None
    name: str
    category: str
    contact_info: Optional[str] = None
    ingredient_name: Optional[str] = None
    contracted_price: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    is_required: bool = False
    notes: Optional[str] = None


class WasteLog(RecordModel):
    item_name: str
    quantity: float = Field(default=0, ge=0)
    unit: str = ""
    cost_per_unit: float = Field(default=0, ge=0)
    total_cost: float = Field(default=0, ge=0)
    reason: str = "other"
    date: datetime
    notes: Optional[str] = None


class FranchiseLocation(RecordModel):
    """One network member and its monthly history."""

    restaurant_id: Identifier
    name: Optional[str] = None
    periods: List[FinancialPeriod] = Field(default_factory=list)


class DeliveryPlatform(RecordModel):
    name: str
    commission: float = Field(..., ge=0, le=100)
    delivery_fee: float = Field(default=0, ge=0)
    monthly_fee: float = Field(default=0, ge=0)
    order_share: float = Field(default=0, ge=0, le=100)


class DeliveryCalculatorPayload(RecordModel):
    avg_order_value: float = Field(default=25, ge=0)
    monthly_orders: int = Field(default=400, ge=0)
    platforms: Optional[List[DeliveryPlatform]] = None
