from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional


class Category(str, Enum):
    THEOLOGY = "Teologi"
    BIBLICAL_STUDIES = "Studi Alkitab"
    MINISTRY = "Pelayanan"
    HISTORY = "Sejarah Gereja"
    GENERAL = "Umum"
    REFERENCE = "Referensi"


class MemberType(str, Enum):
    STUDENT = "Mahasiswa"
    LECTURER = "Dosen"
    STAFF = "Staff"


class LoanStatus(str, Enum):
    ACTIVE = "active"
    OVERDUE = "overdue"
    RETURNED = "returned"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------------
# Stored records
# -----------------------------
class Book(CamelModel):
    id: str
    isbn: str = ""
    title: str
    author: str
    publisher: str = ""
    year: Optional[int] = None
    category: Category = Category.THEOLOGY
    stock: int = Field(ge=0)
    available: int = Field(ge=0)


class Member(CamelModel):
    id: str
    name: str
    email: str
    phone: str = ""
    type: MemberType = MemberType.STUDENT
    join_date: date


class Loan(CamelModel):
    id: str
    book_id: str
    member_id: str
    loan_date: datetime
    due_date: datetime
    return_date: Optional[datetime] = None
    # Only "active" and "returned" are ever written; "overdue" is derived.
    status: LoanStatus = LoanStatus.ACTIVE

    @field_validator('loan_date', 'due_date', 'return_date')
    def assume_utc(cls, v):
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


def to_record(model: BaseModel) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


# -----------------------------
# Requests
# -----------------------------
class BookCreate(CamelModel):
    title: str
    author: str
    isbn: str = ""
    publisher: str = ""
    year: Optional[int] = None
    category: Category = Category.THEOLOGY
    stock: int = 1


class BookUpdate(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    title: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None
    publisher: Optional[str] = None
    year: Optional[int] = None
    category: Optional[Category] = None
    stock: Optional[int] = None


class MemberCreate(CamelModel):
    id: str
    name: str
    email: str
    phone: str = ""
    type: MemberType = MemberType.STUDENT
    join_date: Optional[date] = None


class MemberUpdate(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    type: Optional[MemberType] = None
    join_date: Optional[date] = None


class CheckoutRequest(CamelModel):
    book_id: str
    member_id: str


class AskRequest(BaseModel):
    query: str


class AskResponse(BaseModel):
    answer: str


# -----------------------------
# Read views
# -----------------------------
class LoanView(Loan):
    member_name: str
    book_title: str
    book_isbn: str = ""
    days_late: int = 0


class Stats(CamelModel):
    total_books: int
    active_members: int
    active_loans: int
    overdue_loans: int


class CategoryCount(BaseModel):
    name: str
    value: int


class CriticalOverdue(CamelModel):
    loan_id: str
    name: str
    title: str
    days: int


class DashboardOut(CamelModel):
    stats: Stats
    categories: List[CategoryCount]
    critical_overdues: List[CriticalOverdue]
