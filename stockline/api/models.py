"""Request bodies for the event endpoints."""

from pydantic import BaseModel, Field


class ZoneCompletionEvent(BaseModel):
    """A car finished a production zone."""

    vin: str = Field(..., min_length=1)
    zone_id: str = Field(..., alias="zoneId", min_length=1)
    car_type: str = Field(..., alias="carType", min_length=1)
    completed_by: str = Field("system", alias="completedBy")
    batch_id: str | None = Field(None, alias="batchId")

    model_config = {"populate_by_name": True, "extra": "ignore"}
