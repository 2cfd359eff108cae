"""Read-only views derived from the entity collections."""

import csv
import io
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from library_app.core.config import CRITICAL_OVERDUE_DAYS
from library_app.schemas.schemas import (Book, Category, CategoryCount, CriticalOverdue, Loan, LoanStatus,
                                         LoanView, Member, Stats)
from library_app.services.circulation import CirculationEngine, classify, is_outstanding, lateness_days

UNKNOWN = "Unknown"


def dashboard_stats(books: Sequence[Book], members: Sequence[Member], loans: Sequence[Loan], now: datetime) -> Stats:
    return Stats(
        total_books=sum(b.stock for b in books),
        active_members=len(members),
        active_loans=sum(1 for l in loans if is_outstanding(l)),
        overdue_loans=sum(1 for l in loans if classify(l, now) == LoanStatus.OVERDUE),
    )


def category_distribution(books: Sequence[Book]) -> List[CategoryCount]:
    counts = {c: 0 for c in Category}
    for b in books:
        counts[b.category] += 1
    return [CategoryCount(name=c.value, value=n) for c, n in counts.items() if n > 0]


def critical_overdues(books: Sequence[Book], members: Sequence[Member], loans: Sequence[Loan],
                      now: datetime, threshold: int = CRITICAL_OVERDUE_DAYS) -> List[CriticalOverdue]:
    """Outstanding loans more than ``threshold`` days late, latest first."""
    titles = {b.id: b.title for b in books}
    names = {m.id: m.name for m in members}
    critical = []
    for l in loans:
        days = lateness_days(l, now)
        if days > threshold:
            critical.append(CriticalOverdue(
                loan_id=l.id,
                name=names.get(l.member_id, UNKNOWN),
                title=titles.get(l.book_id, UNKNOWN),
                days=days,
            ))
    critical.sort(key=lambda c: c.days, reverse=True)
    return critical


def loan_views(books: Sequence[Book], members: Sequence[Member], loans: Sequence[Loan],
               now: datetime, tab: Optional[str] = None) -> List[LoanView]:
    """Loans joined with member and book details, newest first.

    ``tab`` is ``"active"`` for outstanding loans, ``"history"`` for returned
    ones, or None for everything. Dangling references show as "Unknown".
    """
    by_book: Dict[str, Book] = {b.id: b for b in books}
    names = {m.id: m.name for m in members}
    views = []
    for l in loans:
        if tab == "active" and not is_outstanding(l):
            continue
        if tab == "history" and is_outstanding(l):
            continue
        book = by_book.get(l.book_id)
        views.append(LoanView(
            **l.model_dump(exclude={"status"}),
            status=classify(l, now),
            member_name=names.get(l.member_id, UNKNOWN),
            book_title=book.title if book else UNKNOWN,
            book_isbn=book.isbn if book else "",
            days_late=lateness_days(l, now),
        ))
    views.sort(key=lambda v: v.loan_date, reverse=True)
    return views


def to_csv(records: Sequence[dict]) -> str:
    """Serialize records with a header row; every value is quoted.

    Optional fields missing from some records are written as empty strings.
    """
    if not records:
        return ""
    output = io.StringIO()
    fields = list(dict.fromkeys(k for r in records for k in r))
    writer = csv.DictWriter(output, fieldnames=fields, quoting=csv.QUOTE_ALL,
                            restval="", lineterminator="\n")
    writer.writeheader()
    for r in records:
        writer.writerow(r)
    return output.getvalue()


class Reports:

    def __init__(self, engine: CirculationEngine):
        self.engine = engine

    def _snapshot(self):
        return self.engine.books(), self.engine.members(), self.engine.loans()

    def dashboard(self, now: Optional[datetime] = None) -> dict:
        now = now or self.engine.clock()
        books, members, loans = self._snapshot()
        return {
            "stats": dashboard_stats(books, members, loans, now),
            "categories": category_distribution(books),
            "critical_overdues": critical_overdues(books, members, loans, now),
        }

    def loans(self, tab: Optional[str] = None, now: Optional[datetime] = None) -> List[LoanView]:
        books, members, loans = self._snapshot()
        return loan_views(books, members, loans, now or self.engine.clock(), tab)

    def export_csv(self, collection: str) -> str:
        return to_csv(self.engine.store.get(collection))
