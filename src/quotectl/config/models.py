"""Pydantic models for quotectl.toml sections.

Each section is frozen; defaults are the values used when the key is
absent from the file and from the environment.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator


class VatConfig(BaseModel):
    """[vat] section."""

    model_config = {"frozen": True}

    permitted_rates: tuple[Decimal, ...] = tuple(Decimal(r) for r in (0, 7, 10, 14, 20))
    default_rate: Decimal = Decimal(20)

    @field_validator("permitted_rates")
    @classmethod
    def _sorted_unique(cls, v: tuple[Decimal, ...]) -> tuple[Decimal, ...]:
        if not v:
            msg = "at least one VAT rate is required"
            raise ValueError(msg)
        if any(rate < 0 for rate in v):
            msg = "VAT rates must not be negative"
            raise ValueError(msg)
        return tuple(sorted(set(v)))

    @model_validator(mode="after")
    def _default_is_permitted(self) -> VatConfig:
        if self.default_rate not in self.permitted_rates:
            msg = f"default_rate {self.default_rate} is not in permitted_rates"
            raise ValueError(msg)
        return self


class DiscountConfig(BaseModel):
    """[discount] section."""

    model_config = {"frozen": True}

    default_designation: str = "Remise globale"


class QuoteConfig(BaseModel):
    """[quote] section."""

    model_config = {"frozen": True}

    validity_days: int = Field(default=30, ge=1)
    currency: str = "MAD"
    default_unit: str = "u"


class DatabaseConfig(BaseModel):
    """[database] section. Relative paths resolve against the workspace root."""

    model_config = {"frozen": True}

    path: str = ".quotectl/quotectl.db"


class CatalogConfig(BaseModel):
    """[catalog] section. An empty path disables catalog commands."""

    model_config = {"frozen": True}

    path: str = ""


class EditorConfig(BaseModel):
    """[editor] section."""

    model_config = {"frozen": True}

    history_limit: int = Field(default=50, ge=0)
