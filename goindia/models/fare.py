from typing import List, Optional
import re
from pydantic import BaseModel, ConfigDict, Field, field_validator


class FareEstimate(BaseModel):
    """Approximate auto/taxi fare for one route, as estimated by the model."""
    model_config = ConfigDict(populate_by_name=True)

    city: str
    from_: str = Field(alias="from")
    to: str
    distance_km: Optional[float] = None
    travel_time: Optional[str] = None
    fare_estimate_inr: Optional[str] = None
    fare_estimate_usd: Optional[str] = None
    scam_alert: Optional[str] = None
    tips: Optional[str] = None
    alternatives: List[str] = []

    @field_validator("distance_km", mode="before")
    @classmethod
    def parse_distance(cls, value):
        # Models sometimes answer "12 km" or "~12.5"
        if isinstance(value, str):
            match = re.search(r"\d+(?:\.\d+)?", value)
            return float(match.group()) if match else None
        return value
