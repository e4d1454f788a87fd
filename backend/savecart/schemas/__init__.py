"""Pydantic schemas for messages exchanged with the page host."""

from savecart.schemas.product_info import ProductInfo, TriggerAction, TriggerRequest, TriggerResponse

__all__ = [
    "ProductInfo",
    "TriggerAction",
    "TriggerRequest",
    "TriggerResponse",
]
