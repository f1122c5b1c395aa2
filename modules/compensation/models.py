# modules/compensation/models.py
from __future__ import annotations

import enum

from sqlalchemy import (
    Column, Integer, String, Boolean, Date, DateTime, ForeignKey, Text, Float, Index, text
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship

# ใช้ Base เดียวกับทั้งโปรเจกต์
from database.base import Base, utcnow

# import Employee เพื่อให้ mapper เห็นคลาสนี้ใน registry เดียวกัน
from modules.data_management.models import Employee  # noqa: F401


# ----------------- Enums -----------------
class IncrementType(str, enum.Enum):
    ANNUAL = "annual_increment"
    PROMOTION = "promotion"
    PERFORMANCE = "performance_based"
    MARKET_ADJUSTMENT = "market_adjustment"
    ROLE_CHANGE = "role_change"
    SPECIAL = "special_increment"
    CORRECTION = "correction"
    OTHER = "other"


class IncrementStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    APPLIED = "applied"


class BonusType(str, enum.Enum):
    PERFORMANCE = "performance_bonus"
    ANNUAL = "annual_bonus"
    FESTIVAL = "festival_bonus"
    REFERRAL = "referral_bonus"
    PROJECT = "project_bonus"
    RETENTION = "retention_bonus"
    SIGNING = "signing_bonus"
    SPOT_AWARD = "spot_award"
    OTHER = "other"


class BonusPaymentStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"
    CANCELLED = "cancelled"


EARNING_FIELDS = (
    "basic_salary", "hra", "da", "special_allowance",
    "transport_allowance", "medical_allowance", "other_allowances",
)
DEDUCTION_FIELDS = (
    "pf_contribution", "esi_contribution", "professional_tax", "tds", "other_deductions",
)


# ----------------- Compensation (effective-dated) -----------------
class EmployeeCompensation(Base):
    __tablename__ = "employee_compensation"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)

    # earnings
    basic_salary = Column(Float, nullable=False)
    hra = Column(Float, nullable=False, default=0.0)
    da = Column(Float, nullable=False, default=0.0)
    special_allowance = Column(Float, nullable=False, default=0.0)
    transport_allowance = Column(Float, nullable=False, default=0.0)
    medical_allowance = Column(Float, nullable=False, default=0.0)
    other_allowances = Column(Float, nullable=False, default=0.0)

    # deductions
    pf_contribution = Column(Float, nullable=False, default=0.0)
    esi_contribution = Column(Float, nullable=False, default=0.0)
    professional_tax = Column(Float, nullable=False, default=0.0)
    tds = Column(Float, nullable=False, default=0.0)
    other_deductions = Column(Float, nullable=False, default=0.0)

    # derived (คำนวณใหม่ทุกครั้งที่บันทึก)
    gross_salary = Column(Float, nullable=False, default=0.0)
    total_deductions = Column(Float, nullable=False, default=0.0)
    net_salary = Column(Float, nullable=False, default=0.0)

    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)
    is_current = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)

    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    employee = relationship("Employee")

    __table_args__ = (
        # พนักงานหนึ่งคนมี record ที่ is_current ได้ไม่เกินหนึ่งแถว
        Index(
            "uq_compensation_one_current",
            "employee_id",
            unique=True,
            sqlite_where=text("is_current = 1"),
            postgresql_where=text("is_current"),
        ),
    )

    def recompute_totals(self) -> None:
        gross = sum(float(getattr(self, f) or 0.0) for f in EARNING_FIELDS)
        deductions = sum(float(getattr(self, f) or 0.0) for f in DEDUCTION_FIELDS)
        self.gross_salary = round(gross, 2)
        self.total_deductions = round(deductions, 2)
        self.net_salary = round(gross - deductions, 2)

    def __repr__(self):
        return (f"<EmployeeCompensation id={self.id} employee_id={self.employee_id} "
                f"from={self.effective_from} current={self.is_current}>")


# ----------------- Increments -----------------
class SalaryIncrement(Base):
    __tablename__ = "salary_increments"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    increment_type = Column(SAEnum(IncrementType), nullable=False)

    previous_basic = Column(Float, nullable=False)
    new_basic = Column(Float, nullable=False)
    previous_gross = Column(Float, nullable=True)
    new_gross = Column(Float, nullable=True)
    increment_amount = Column(Float, nullable=False)
    increment_percentage = Column(Float, nullable=True)
    effective_date = Column(Date, nullable=False)

    status = Column(SAEnum(IncrementStatus), nullable=False, default=IncrementStatus.PENDING)
    approved_by = Column(Integer, nullable=True)
    approved_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    compensation_id = Column(Integer, ForeignKey("employee_compensation.id"), nullable=True)

    reason = Column(Text, nullable=True)
    remarks = Column(Text, nullable=True)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # ทางเดียว เพื่อไม่ต้องไปแก้โมเดล Employee
    employee = relationship("Employee")
    compensation = relationship("EmployeeCompensation")


# ----------------- Bonuses -----------------
class EmployeeBonus(Base):
    __tablename__ = "employee_bonuses"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    bonus_type = Column(SAEnum(BonusType), nullable=False)
    bonus_name = Column(String, nullable=False)

    amount = Column(Float, nullable=False)
    is_taxable = Column(Boolean, nullable=False, default=True)
    tax_amount = Column(Float, nullable=False, default=0.0)
    net_amount = Column(Float, nullable=False, default=0.0)

    bonus_period_start = Column(Date, nullable=True)
    bonus_period_end = Column(Date, nullable=True)
    payment_date = Column(Date, nullable=True)
    payment_status = Column(SAEnum(BonusPaymentStatus), nullable=False, default=BonusPaymentStatus.PENDING)

    approved_by = Column(Integer, nullable=True)
    approved_at = Column(DateTime, nullable=True)
    reason = Column(Text, nullable=True)
    remarks = Column(Text, nullable=True)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    employee = relationship("Employee")

    def recompute_net(self) -> None:
        amount = float(self.amount or 0.0)
        tax = float(self.tax_amount or 0.0)
        self.net_amount = round(amount - tax, 2) if self.is_taxable else round(amount, 2)
