from pydantic import BaseModel
from typing import List
import datetime as dt

class DayPhaseOut(BaseModel):
    date: dt.date
    tz: str
    phase: str
    label: str
    asset: str

class PhaseEventOut(BaseModel):
    instant: dt.datetime
    phase: str

class MonthCalendarOut(BaseModel):
    year: int
    month: int
    tz: str
    days: List[DayPhaseOut]
    events: List[PhaseEventOut]
