# modules/data_management/schemas.py
from __future__ import annotations

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, EmailStr

from modules.data_management import models


class EmployeeBase(BaseModel):
    employee_number: str = Field(..., min_length=1, max_length=50, description="รหัสพนักงาน")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field("", max_length=100)
    email: EmailStr
    role: str = "USER"
    designation: Optional[str] = None
    department: Optional[str] = None
    hire_date: Optional[date] = None
    employment_status: models.EmploymentStatus = models.EmploymentStatus.ACTIVE


class EmployeeCreate(EmployeeBase):
    pass

