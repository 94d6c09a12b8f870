from decimal import Decimal

from pydantic import BaseModel, Field

from backend.app.core_types import VariantStatus


class VariantStateRead(BaseModel):
    product_id: str
    variant_id: str
    name: str
    color: str
    size: str
    sku: str
    cost: Decimal

    ordered: int
    prior_received: int
    receiving_now: int
    defective: int

    pre_order: bool
    preorder_stop: bool
    canceled: bool
    locked: bool

    class Config:
        from_attributes = True


class VariantProgressRead(BaseModel):
    total_received: int  # READ ONLY : calculé
    is_fully_received: bool
    is_over_received: bool
    status: VariantStatus
    can_increment: bool
    can_decrement: bool
    can_set_defective: bool
    defective_exceeds_ordered: bool

    class Config:
        from_attributes = True


class DefectiveUpdate(BaseModel):
    value: int = Field(le=1_000_000)
