from datetime import datetime

from pydantic import BaseModel

from fleetcaf.schemas.caf import CafRead


class IncidentCompletionRead(BaseModel):
    incident_id: str
    status: str
    is_complete: bool
    caf_count: int
    completed_at: datetime | None = None

    class Config:
        from_attributes = True


class GeneratedCafsRead(BaseModel):
    incident_id: str
    generated_count: int
    cafs: list[CafRead]
