"""Quote metadata: client, dates and status."""

from __future__ import annotations

from datetime import date, timedelta

from pydantic import BaseModel, Field, computed_field

from quotectl.domain.lifecycle import QuoteStatus

# Never writable through update_quote_info.
PROTECTED_QUOTE_FIELDS: frozenset[str] = frozenset({"quote_id", "number", "expiry_date"})


class QuoteMeta(BaseModel):
    """Client, dates and status of a quote."""

    model_config = {"frozen": True}

    quote_id: str | None = None
    number: str | None = None
    status: QuoteStatus = QuoteStatus.DRAFT
    client_name: str = ""
    client_address: str = ""
    project_name: str = ""
    issue_date: date = Field(default_factory=date.today)
    validity_period: int = Field(default=30, ge=1)
    notes: str = ""
    conditions: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def expiry_date(self) -> date:
        return self.issue_date + timedelta(days=self.validity_period)
