# module webshop.orders.models
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class OrderLineIn(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    price: float = Field(ge=0)


class OrderIn(BaseModel):
    """Création directe d'une commande (back-office)."""
    user_id: str = Field(min_length=1)
    order_date: Optional[datetime] = None
    status: str = "Pending"
    order_lines: List[OrderLineIn] = Field(min_length=1)

    @field_validator("status")
    def status_not_blank(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("status vide")
        return v
