"""Pydantic schemas for the messages exchanged with the page host.

These define the contract between the extraction engine running against a
page and the popup / background / backend collaborators. Field names are
snake_case in Python and camelCase on the wire.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Extraction result
# ---------------------------------------------------------------------------


class ProductInfo(BaseModel):
    """Product detected on a page, as sent to the popup or backend."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    title: str = Field(
        ...,
        min_length=1,
        description="Product display title",
        examples=["Sony WH-1000XM5 Wireless Headphones"],
    )
    current_price: Optional[float] = Field(
        None,
        ge=0,
        description="Current selling price. None when it could not be read.",
        examples=[348.0],
    )
    original_price: Optional[float] = Field(
        None,
        ge=0,
        description="Pre-discount price; only present when above current_price",
        examples=[399.99],
    )
    image_url: Optional[str] = Field(
        None,
        description="Main product image URL",
    )
    currency: str = Field(
        "USD",
        min_length=1,
        description="ISO 4217 currency code",
        examples=["USD", "INR"],
    )
    store: str = Field(
        ...,
        description="Store name derived from the page hostname",
        examples=["Amazon"],
    )
    product_url: str = Field(
        ...,
        min_length=1,
        description="Location of the page the product was read from",
    )


# ---------------------------------------------------------------------------
# Trigger protocol
# ---------------------------------------------------------------------------

TriggerAction = Literal["extract_now", "detect_on_navigation"]


class TriggerRequest(BaseModel):
    """Request to run extraction against a tab's current page.

    ``extract_now`` is sent by the user-initiated popup and always attempts
    extraction. ``detect_on_navigation`` is sent when a page finishes
    loading and is gated by the product-page heuristic.
    """

    action: TriggerAction
    tab_id: int = Field(..., description="Host tab identifier")
    url: str = Field(..., min_length=1, description="Current page location")
    html: Optional[str] = Field(
        None,
        description="Page markup when the host already holds it; fetched otherwise",
    )


class TriggerResponse(BaseModel):
    """Answer to a TriggerRequest. Always sent, even when nothing was found."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_info: Optional[ProductInfo] = None
    reason: Optional[str] = Field(
        None,
        description=(
            "Why no product was returned: not_found, not_product_page, unusable, "
            "duplicate, stale, disabled, unsupported_store, fetch_failed"
        ),
    )

    @property
    def found(self) -> bool:
        return self.product_info is not None
