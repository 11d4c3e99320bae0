from pydantic import BaseModel
from typing import List

class Summary(BaseModel):
    total_events: int
    total_registrations: int
    pending_count: int
    approved_count: int
    own_institution_events: int
    other_institution_events: int
    most_registered_event: str

class EventRegistrationCount(BaseModel):
    event_id: int
    title: str
    registrations: int

class CategoryCount(BaseModel):
    category: str
    count: int

class MonthlyBucket(BaseModel):
    year: int
    month: int
    label: str
    registrations: int

class EventRegistrations(BaseModel):
    data: List[EventRegistrationCount]

class CategoryDistribution(BaseModel):
    data: List[CategoryCount]

class MonthlyGrowth(BaseModel):
    data: List[MonthlyBucket]
