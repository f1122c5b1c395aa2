# modules/compensation/reports.py
from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from modules.data_management import services as employee_services
from . import bonuses, increments, ledger, models


def employee_compensation_summary(db: Session, employee_id: int, today: Optional[date] = None) -> dict:
    """Current pay, bonus totals and increment count for one employee."""
    employee_services.require_employee(db, employee_id)
    today = today or date.today()

    current = ledger.get_current(db, employee_id)
    all_increments = increments.list_increments(db, employee_id=employee_id, limit=None)
    all_bonuses = bonuses.list_bonuses(db, employee_id=employee_id, limit=None)

    applied = [i for i in all_increments if i.status == models.IncrementStatus.APPLIED]
    paid = [b for b in all_bonuses if b.payment_status == models.BonusPaymentStatus.PAID]

    # ปีของโบนัส = วันที่จ่าย ถ้าไม่มีใช้วันที่สร้าง
    paid_this_year = [
        b for b in paid
        if (b.payment_date or b.created_at.date()).year == today.year
    ]

    return {
        "current_compensation": current,
        "total_bonuses_paid": round(sum(float(b.net_amount) for b in paid), 2),
        "total_bonuses_this_year": round(sum(float(b.net_amount) for b in paid_this_year), 2),
        "total_increments": len(applied),
        "latest_increment": applied[0] if applied else None,
        "pending_bonuses": sum(
            1 for b in all_bonuses
            if b.payment_status in (models.BonusPaymentStatus.PENDING, models.BonusPaymentStatus.APPROVED)
        ),
        "history": ledger.history(db, employee_id),
    }
