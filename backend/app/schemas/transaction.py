from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field, field_serializer


class VariantUpdate(BaseModel):
    variant_ref: str = Field(alias="variantShopifyId")
    inventory_ref: str | None = Field(default=None, alias="variantShopifyInventoryItemId")
    update_flag: bool = Field(alias="updateVariantFlag")
    quantity_delta: int = Field(alias="variantQuantityReceived")
    completed: bool = Field(alias="variantReceivedComplete")
    preorder_stop: bool = Field(alias="variantPreorderStop")
    # orthographe imposée par le backend
    fulfillment_refs: str = Field(default="", alias="variantOrderTofFullfill")
    cost: Decimal = Field(default=Decimal("0"), alias="variantCost")
    name: str = Field(default="", alias="variantName")
    defective: int = 0

    class Config:
        populate_by_name = True
        frozen = True

    @field_serializer("cost")
    def _cost_as_number(self, v: Decimal) -> float:
        return float(v)


class ProductUpdate(BaseModel):
    product_ref: str = Field(alias="productShopifyId")
    update_flag: bool = Field(alias="updateProductFlag")
    variants: list[VariantUpdate] = Field(default_factory=list, alias="productVariants")

    class Config:
        populate_by_name = True
        frozen = True


class Transaction(BaseModel):
    order_id: str = Field(alias="purchaseOrderID")
    season: str = ""
    total_received_so_far: int = Field(alias="totalVariantReceivedQuantity")
    products: list[ProductUpdate] = Field(default_factory=list)

    class Config:
        populate_by_name = True
        frozen = True

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
