"""
Dashboard Schemas
"""

from pydantic import BaseModel


class SourceCount(BaseModel):
    source: str
    count: int


class FunnelCounts(BaseModel):
    applied: int
    viewed: int
    interview: int
    offer: int


class WeeklyCount(BaseModel):
    week: str
    count: int


class DashboardResponse(BaseModel):
    """Everything the dashboard page renders for one user."""

    total_applications: int
    total_offers: int
    offer_rate: float
    active_applications: int
    avg_hours_to_first_response: float
    applications_by_source: list[SourceCount]
    funnel: FunnelCounts
    weekly_series: list[WeeklyCount]
