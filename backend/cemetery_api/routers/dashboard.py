"""Dashboard statistics."""
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import AccountPayable, AccountReceivable, Burial, Deposit, InventoryItem, WorkOrder

router = APIRouter(prefix="/dashboard", tags=["dashboard"], dependencies=[Depends(get_current_user)])

REVENUE_MONTHS = 6
TOP_SECTIONS = 5


def _add_months(month_start: date, months: int) -> date:
    index = month_start.year * 12 + (month_start.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_windows(today: date, count: int = REVENUE_MONTHS) -> list[tuple[date, date]]:
    """[start, end) pairs for the last ``count`` months, oldest first, ending with today's month."""
    current = today.replace(day=1)
    return [
        (_add_months(current, offset), _add_months(current, offset + 1))
        for offset in range(-(count - 1), 1)
    ]


def _sum(db: Session, column, date_column, start: date, end: date) -> float:
    total = db.query(func.coalesce(func.sum(column), 0)).filter(date_column >= start, date_column < end).scalar()
    return float(total or 0)


def build_stats(db: Session, today: date | None = None) -> dict:
    today = today or date.today()

    status_counts = dict(db.query(WorkOrder.status, func.count(WorkOrder.id)).group_by(WorkOrder.status).all())

    inventory_total = db.query(func.count(InventoryItem.id)).scalar() or 0
    low_stock = (
        db.query(func.count(InventoryItem.id))
        .filter(InventoryItem.quantity <= InventoryItem.reorder_point)
        .scalar()
        or 0
    )

    receivables_total = db.query(func.count(AccountReceivable.id)).scalar() or 0
    receivables_overdue = (
        db.query(func.count(AccountReceivable.id)).filter(AccountReceivable.status == "overdue").scalar() or 0
    )
    outstanding = db.query(
        func.coalesce(func.sum(AccountReceivable.amount - AccountReceivable.amount_paid), 0)
    ).scalar()

    this_month_start, next_month_start = month_windows(today, 1)[0]
    burials_total = db.query(func.count(Burial.id)).scalar() or 0
    burials_this_month = (
        db.query(func.count(Burial.id))
        .filter(Burial.burial_date >= this_month_start, Burial.burial_date < next_month_start)
        .scalar()
        or 0
    )

    revenue = [
        {
            "name": start.strftime("%b"),
            "income": _sum(db, Deposit.amount, Deposit.date, start, end),
            "expenses": _sum(db, AccountPayable.amount, AccountPayable.due_date, start, end),
        }
        for start, end in month_windows(today)
    ]

    section_count = func.count(Burial.id).label("value")
    sections = (
        db.query(Burial.section, section_count)
        .group_by(Burial.section)
        .order_by(section_count.desc(), Burial.section)
        .limit(TOP_SECTIONS)
        .all()
    )

    return {
        "workOrders": {
            "total": sum(status_counts.values()),
            "pending": status_counts.get("pending", 0),
            "inProgress": status_counts.get("in_progress", 0),
            "completed": status_counts.get("completed", 0),
        },
        "inventory": {"total": inventory_total, "lowStock": low_stock},
        "receivables": {
            "total": receivables_total,
            "overdue": receivables_overdue,
            "amount": float(outstanding or 0),
        },
        "burials": {"total": burials_total, "thisMonth": burials_this_month},
        "charts": {
            "revenue": revenue,
            "burialDistribution": [{"name": name, "value": value} for name, value in sections],
        },
    }


@router.get("/stats")
def get_stats(db: Session = Depends(get_db)):
    return build_stats(db)
