# modules/data_management/models.py
import enum

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, Integer, String

from database.base import Base, utcnow


class EmploymentStatus(enum.Enum):
    ACTIVE = "active"
    ON_LEAVE = "on_leave"
    RESIGNED = "resigned"
    TERMINATED = "terminated"


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    employee_number = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, index=True, nullable=False)
    last_name = Column(String, index=True, nullable=False, default="")
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(String, nullable=False, default="USER")
    designation = Column(String, nullable=True)
    department = Column(String, nullable=True)
    hire_date = Column(Date, nullable=True)
    employment_status = Column(Enum(EmploymentStatus), default=EmploymentStatus.ACTIVE, nullable=False)

    # credential record (1:1 กับพนักงาน เก็บในแถวเดียวกัน)
    password_hash = Column(String, nullable=True)
    is_first_login = Column(Boolean, default=True, nullable=False)
    failed_login_attempts = Column(Integer, default=0, nullable=False)
    account_locked = Column(Boolean, default=False, nullable=False)
    locked_until = Column(DateTime, nullable=True)
    password_changed_at = Column(DateTime, nullable=True)
    last_login_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    @property
    def is_active(self) -> bool:
        return self.employment_status == EmploymentStatus.ACTIVE

    def __repr__(self):
        return f"<Employee id={self.id} email={self.email} status={self.employment_status}>"
