# schemas/recommendation.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

GENERAL_CATEGORY_ID = 0
GENERAL_CATEGORY_NAME = "General"


class LineItemRequest(BaseModel):
    """One quote line the caller wants suppliers for."""

    line_item_id: int
    unit_id: int = Field(..., description="size_quantity id (priceable unit)")
    quantity: int = Field(..., gt=0)
    display_name: Optional[str] = None


class PriceRow(BaseModel):
    supplier_id: int
    price_per_unit: float = Field(..., ge=0)
    delivery_days: int = Field(..., ge=0)


class ClassifiedItem(BaseModel):
    line_item_id: int
    unit_id: int
    category_id: int
    category_name: str
    product_name: str
    quantity: int


class CategoryGroup(BaseModel):
    category_id: int
    category_name: str
    items: List[ClassifiedItem]

    @property
    def unit_ids(self) -> set:
        return {it.unit_id for it in self.items}


class ReliabilityStats(BaseModel):
    reliability_pct: float
    total_ready_jobs: int = 0


class RatingStats(BaseModel):
    avg_rating: float
    total_ratings: int = 0


class SpeedStats(BaseModel):
    avg_delivery_days: float
    total_deliveries: int = 0


class SupplierWeights(BaseModel):
    """Scoring weights in percent. By convention they sum to 100."""

    price: float = 40
    rating: float = 30
    delivery_time: float = 20
    reliability: float = 10

    @field_validator("price", "rating", "delivery_time", "reliability")
    @classmethod
    def non_negative(cls, v):
        if v < 0:
            raise ValueError("weights must be non-negative")
        return v

    @property
    def total(self) -> float:
        return self.price + self.rating + self.delivery_time + self.reliability

    def normalized(self) -> "SupplierWeights":
        """Rescale so the weights sum to 100; all-zero means equal weighting."""
        total = self.total
        if total == 0:
            return SupplierWeights(price=25, rating=25, delivery_time=25, reliability=25)
        factor = 100 / total
        return SupplierWeights(
            price=self.price * factor,
            rating=self.rating * factor,
            delivery_time=self.delivery_time * factor,
            reliability=self.reliability * factor,
        )


DEFAULT_SUPPLIER_WEIGHTS = SupplierWeights(
    price=40, rating=30, delivery_time=20, reliability=10
)


class FulfillableItem(BaseModel):
    line_item_id: int
    unit_id: int
    price_per_unit: float
    delivery_days: int


class Coverage(BaseModel):
    """What one supplier can price inside one category group."""

    supplier_id: int
    can_fulfill: List[FulfillableItem] = []
    total_price: float = 0.0
    max_delivery_days: int = 0

    def covered_unit_ids(self) -> set:
        return {it.unit_id for it in self.can_fulfill}


class SupplierScore(BaseModel):
    supplier_id: int
    supplier_name: str
    supplier_company: Optional[str] = None
    avg_rating: float
    total_price: float
    avg_delivery_days: int  # slowest item in the category
    reliability_pct: int
    total_score: int = 0
    rank: int = 0
    full_coverage: bool = True
    can_fulfill: List[FulfillableItem] = []


class CategoryRecommendation(BaseModel):
    category_id: int
    category_name: str
    items: List[ClassifiedItem]
    suppliers: List[SupplierScore] = []


class ItemSupplierScore(BaseModel):
    supplier_id: int
    supplier_name: str
    supplier_company: Optional[str] = None
    avg_rating: float
    price_per_unit: float
    delivery_days: int
    reliability_pct: int
    total_score: int = 0
    rank: int = 0
    can_fulfill_other_items: int = 0
    multi_item_bonus: float = 0  # percent


class ItemRecommendation(BaseModel):
    line_item_id: int
    unit_id: int
    product_name: str
    category_name: str
    quantity: int
    suppliers: List[ItemSupplierScore] = []


class RecommendationRequest(BaseModel):
    quote_items: List[LineItemRequest]
    weights: Optional[SupplierWeights] = None
