"""Loan lifecycle and availability accounting.

The engine is the only code that creates loans, closes them, or moves a
book's ``available`` counter. Checkout and return each read the books and
loans collections, change them, and write both back inside one store
transaction while holding ``WRITE_LOCK``. Whole-collection writes would
otherwise lose updates when two requests interleave.

Lateness is never stored: ``classify`` derives it from the due date each
time it is asked.
"""

import logging
import math
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional

from library_app.core.config import LOAN_PERIOD_DAYS
from library_app.core.exceptions import AlreadyReturned, NotFound, OutOfStock
from library_app.core.store import BOOKS, LOANS, MEMBERS, EntityStore
from library_app.schemas.schemas import Book, Loan, LoanStatus, Member, to_record
from library_app.services import validation

logger = logging.getLogger("library.circulation")

# Shared by every writer in the process, not only the engine.
WRITE_LOCK = threading.RLock()

ONE_DAY = timedelta(days=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(now: datetime) -> datetime:
    """Read a datetime without tzinfo as UTC, like stored loan dates."""
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def classify(loan: Loan, now: datetime) -> LoanStatus:
    if loan.status == LoanStatus.RETURNED:
        return LoanStatus.RETURNED
    if as_utc(now) > loan.due_date:
        return LoanStatus.OVERDUE
    return LoanStatus.ACTIVE


def is_outstanding(loan: Loan) -> bool:
    return loan.status != LoanStatus.RETURNED


def lateness_days(loan: Loan, now: datetime) -> int:
    """Whole days past due, rounded up; 0 for returned or not-yet-due loans."""
    now = as_utc(now)
    if not is_outstanding(loan) or now <= loan.due_date:
        return 0
    return math.ceil((now - loan.due_date) / ONE_DAY)


def next_id(existing: Iterable[str], now: datetime, prefix: str = "") -> str:
    """Millisecond timestamp id, bumped until it is unused."""
    taken = set(existing)
    stamp = int(now.timestamp() * 1000)
    while f"{prefix}{stamp}" in taken:
        stamp += 1
    return f"{prefix}{stamp}"


def outstanding_count(book_id: str, loans: Iterable[Loan]) -> int:
    return sum(1 for l in loans if l.book_id == book_id and is_outstanding(l))


class CirculationEngine:

    def __init__(self, store: EntityStore, loan_period: Optional[timedelta] = None,
                 clock: Callable[[], datetime] = utcnow, lock=WRITE_LOCK):
        self.store = store
        self.loan_period = loan_period if loan_period is not None else timedelta(days=LOAN_PERIOD_DAYS)
        self.clock = clock
        self.lock = lock

    def books(self) -> List[Book]:
        return [Book.model_validate(r) for r in self.store.get(BOOKS)]

    def members(self) -> List[Member]:
        return [Member.model_validate(r) for r in self.store.get(MEMBERS)]

    def loans(self) -> List[Loan]:
        return [Loan.model_validate(r) for r in self.store.get(LOANS)]

    def get_loan(self, loan_id: str) -> Loan:
        loan = next((l for l in self.loans() if l.id == loan_id), None)
        if loan is None:
            raise NotFound(f"Loan {loan_id} not found")
        return loan

    def checkout(self, book_id: str, member_id: str) -> Loan:
        member_id = validation.normalize_member_id(member_id)
        with self.lock:
            books = self.books()
            book = next((b for b in books if b.id == book_id), None)
            if book is None:
                raise NotFound(f"Book {book_id} not found")
            if not any(m.id == member_id for m in self.members()):
                raise NotFound(f"Member {member_id} not found")
            if book.available <= 0:
                raise OutOfStock(f"No copies of {book.title!r} available")

            loans = self.loans()
            now = self.clock()
            loan = Loan(
                id=next_id((l.id for l in loans), now, prefix="L-"),
                book_id=book.id,
                member_id=member_id,
                loan_date=now,
                due_date=now + self.loan_period,
                status=LoanStatus.ACTIVE,
            )
            book.available -= 1
            loans.append(loan)
            with self.store.transaction():
                self.store.put(BOOKS, [to_record(b) for b in books])
                self.store.put(LOANS, [to_record(l) for l in loans])
        logger.info(f"Member {member_id} borrowed book {book_id} loan {loan.id} due {loan.due_date.isoformat()}")
        return loan

    def return_loan(self, loan_id: str) -> Loan:
        with self.lock:
            loans = self.loans()
            loan = next((l for l in loans if l.id == loan_id), None)
            if loan is None:
                raise NotFound(f"Loan {loan_id} not found")
            if not is_outstanding(loan):
                raise AlreadyReturned(f"Loan {loan_id} was already returned")

            loan.status = LoanStatus.RETURNED
            loan.return_date = self.clock()
            books = self.books()
            book = next((b for b in books if b.id == loan.book_id), None)
            with self.store.transaction():
                if book is not None:
                    book.available = min(book.stock, book.available + 1)
                    self.store.put(BOOKS, [to_record(b) for b in books])
                self.store.put(LOANS, [to_record(l) for l in loans])
        if book is None:
            logger.warning(f"Loan {loan_id} returned but book {loan.book_id} no longer exists")
        else:
            logger.info(f"Loan {loan_id} returned")
        return loan

    def outstanding_count(self, book_id: str) -> int:
        return outstanding_count(book_id, self.loans())
