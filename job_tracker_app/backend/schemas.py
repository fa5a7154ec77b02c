from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, List

# Token Schemas
class Token(BaseModel):
    access_token: str
    token_type: str

# User Schemas
class UserBase(BaseModel):
    email: str

class UserCreate(UserBase):
    password: str

class User(UserBase):
    id: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)

# Error envelope returned by every failed mutation
class ActionErrorResponse(BaseModel):
    error: str
    fieldErrors: Optional[Dict[str, str]] = None

class ActionSuccessResponse(BaseModel):
    success: bool = True

# Section Schemas
class Section(BaseModel):
    id: str
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class SectionWithCount(Section):
    application_count: int = 0

class SectionName(BaseModel):
    name: Optional[str] = None

# Application Tracker Schemas
class Application(BaseModel):
    id: str
    user_id: str
    section_id: Optional[str] = None
    section_name: Optional[str] = None
    company_name: str
    position_title: str
    job_posting_url: Optional[str] = None
    location: Optional[str] = None
    work_type: Optional[str] = None
    salary_range_min: Optional[int] = None
    salary_range_max: Optional[int] = None
    status: str = Field(..., examples=["applied"])
    date_applied: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class StatusUpdate(BaseModel):
    status: Optional[str] = None

class ApplicationGroup(BaseModel):
    name: str
    count: int
    is_unsectioned: bool = False
    applications: List[Application]

class GroupedApplications(BaseModel):
    view: str
    groups: List[ApplicationGroup]
