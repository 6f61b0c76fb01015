"""Inventory item model for the low-stock digest."""

from pydantic import BaseModel, ConfigDict, field_validator


class InventoryItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    current_stock: float = 0.0
    min_stock: float = 0.0
    unit: str | None = ""

    @field_validator("current_stock", "min_stock", mode="before")
    @classmethod
    def _null_as_zero(cls, value: object) -> object:
        return 0.0 if value is None else value

    @property
    def is_low_stock(self) -> bool:
        """Low when a positive minimum is set and stock has fallen to it."""
        return self.min_stock > 0 and self.current_stock <= self.min_stock
