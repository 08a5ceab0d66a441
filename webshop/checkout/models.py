# module webshop.checkout.models
"""Corps de requête du checkout (format JSON du front: camelCase)."""
from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field, field_validator


class CartItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(alias="productId")
    quantity: int = Field(gt=0)

    def as_cart_line(self) -> Dict[str, Any]:
        return {"product_id": self.product_id, "quantity": self.quantity}


class CartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cart: List[CartItem] = Field(default_factory=list)
    user_id: str = Field(alias="userId", min_length=1)

    @field_validator("user_id")
    def strip_user_id(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("userId vide")
        return v

    def cart_lines(self) -> List[Dict[str, Any]]:
        return [item.as_cart_line() for item in self.cart]
