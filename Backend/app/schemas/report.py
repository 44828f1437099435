import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from uuid import UUID

from app.models.report_row import ReportSource

class ReportRowCreate(BaseModel):
    period: str = Field(pattern=r"^\d{4}-(0[1-9]|1[0-2])$")
    source: ReportSource
    territory: str = Field(min_length=2, max_length=2)
    upc: Optional[str] = None
    isrc: Optional[str] = None
    units: int = Field(default=0, ge=0)
    revenue_cents: int = Field(default=0, ge=0)

class ReportRowResponse(BaseModel):
    id: UUID
    org_id: UUID
    period: str
    source: str
    territory: str
    upc: Optional[str] = None
    isrc: Optional[str] = None
    units: int
    revenue_cents: int
    created_at: Optional[datetime.datetime] = None

    model_config = ConfigDict(from_attributes=True)

class RevenueSummary(BaseModel):
    total_revenue: float  # currency units, not cents
    streams: int

class ReportsResponse(BaseModel):
    report_rows: List[ReportRowResponse]
    summary: RevenueSummary

class OrgStats(BaseModel):
    total_revenue: float
    active_releases: int
    total_streams: int
    pending_review: int
