from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class FulfillmentRef(BaseModel):
    order_number: str = Field(default="", alias="shopifyOrderNumber")
    customer_name: str = Field(default="", alias="shopifyCustomerName")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("order_number", "customer_name", mode="before")
    @classmethod
    def _to_str(cls, v):
        return "" if v is None else str(v)

    def label(self) -> str:
        return f"{self.order_number} - {self.customer_name}"


class VariantSnapshot(BaseModel):
    color: str = Field(default="", alias="variantColor")
    size: str = Field(default="", alias="variantSize")
    ordered: int = Field(alias="variantQuantity")
    prior_received: int = Field(default=0, alias="variantQuantityReceived")
    cost: Decimal = Field(default=Decimal("0"), alias="variantCost")
    retail: Decimal = Field(default=Decimal("0"), alias="variantRetail")
    sku: str = Field(default="", alias="variantSku")
    barcode: str = Field(default="", alias="variantBarcode")
    pre_order: bool = Field(default=False, alias="variantPreOrder")

    product_ref: str | None = Field(default=None, alias="variantShopifyProductGid")
    variant_ref: str | None = Field(default=None, alias="variantShopifyGid")
    inventory_ref: str | None = Field(default=None, alias="variantShopifyInventoryItemGid")

    fulfillment_refs: list[FulfillmentRef] = Field(default_factory=list, alias="ordersToFulfil")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("prior_received", mode="before")
    @classmethod
    def _null_received_is_zero(cls, v):
        return 0 if v is None else v

    @field_validator("cost", "retail", mode="before")
    @classmethod
    def _null_money_is_zero(cls, v):
        return Decimal("0") if v is None else v

    @field_validator("color", "size", "sku", "barcode", mode="before")
    @classmethod
    def _null_text_is_empty(cls, v):
        return "" if v is None else str(v)

    @field_validator("pre_order", mode="before")
    @classmethod
    def _normalize_pre_order(cls, v):
        # Le backend envoie tantôt un bool, tantôt "true"/"false"
        if v is None:
            return False
        if isinstance(v, str):
            return v.strip().lower() == "true"
        return bool(v)

    @field_validator("fulfillment_refs", mode="before")
    @classmethod
    def _null_refs_is_empty(cls, v):
        return [] if v is None else v

    def fulfillment_label(self) -> str:
        return " / ".join(ref.label() for ref in self.fulfillment_refs)


class ProductSnapshot(BaseModel):
    name: str = Field(default="", alias="productName")
    product_type: str = Field(default="", alias="productType")
    tags: str = Field(default="", alias="productTags")
    canceled: bool = Field(default=False, alias="productCanceled")
    product_ref: str | None = Field(default=None, alias="productShopifyGid")
    variants: list[VariantSnapshot] = Field(default_factory=list, alias="productVariants")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("tags", mode="before")
    @classmethod
    def _join_tags(cls, v):
        if v is None:
            return ""
        if isinstance(v, (list, tuple)):
            return ", ".join(str(t) for t in v)
        return str(v)

    @field_validator("name", "product_type", mode="before")
    @classmethod
    def _null_text_is_empty(cls, v):
        return "" if v is None else str(v)

    @field_validator("canceled", mode="before")
    @classmethod
    def _null_flag_is_false(cls, v):
        return False if v is None else v


class OrderSnapshot(BaseModel):
    """
    Lecture immuable d'un PO publié, prise au début de la session de réception.
    Noms des champs wire (camelCase) acceptés en alias.
    """

    order_id: str = Field(alias="purchaseOrderID")
    brand: str = ""
    season: str = Field(default="", alias="purchaseOrderSeason")
    created_date: str | None = Field(default=None, alias="createdDate")
    start_ship_date: str | None = Field(default=None, alias="startShipDate")
    completed_date: str | None = Field(default=None, alias="completedDate")
    brand_po_number: str | None = Field(default=None, alias="brandPoNumber")

    terms: str | None = None
    deposit_percent: Decimal | None = Field(default=None, alias="depositPercent")
    on_deliver_percent: Decimal | None = Field(default=None, alias="onDeliverPercent")
    net30_percent: Decimal | None = Field(default=None, alias="net30Percent")

    total_product_quantity: int = Field(default=0, alias="totalProductQuantity")
    total_variant_quantity: int = Field(default=0, alias="totalVariantQuantity")
    total_variant_received_quantity: int = Field(default=0, alias="totalVariantReceivedQuantity")
    complete_receive: bool = Field(default=False, alias="purchaseOrderCompleteReceive")

    products: list[ProductSnapshot] = Field(default_factory=list)

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("order_id", "season", "brand", mode="before")
    @classmethod
    def _to_str(cls, v):
        return "" if v is None else str(v)

    @field_validator(
        "total_product_quantity",
        "total_variant_quantity",
        "total_variant_received_quantity",
        mode="before",
    )
    @classmethod
    def _null_total_is_zero(cls, v):
        return 0 if v is None else v

    @field_validator("complete_receive", mode="before")
    @classmethod
    def _null_flag_is_false(cls, v):
        return False if v is None else v
