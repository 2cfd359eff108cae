from datetime import timedelta

from library_app.core.store import BOOKS
from library_app.schemas.schemas import BookCreate, Category, LoanStatus, MemberCreate
from library_app.services.reports import Reports, to_csv


def test_dashboard_counts(catalog, engine, book, member, clock):
    other = catalog.add_book(BookCreate(title="Sejarah Gereja Asia", author="Dr. Anne R",
                                        category=Category.HISTORY, stock=2))
    first = engine.checkout(book.id, member.id)
    clock.advance(days=5)
    engine.checkout(other.id, member.id)
    clock.advance(days=3)

    out = Reports(engine).dashboard()
    stats = out["stats"]
    assert stats.total_books == 3
    assert stats.active_members == 1
    assert stats.active_loans == 2
    assert stats.overdue_loans == 1
    assert [(c.name, c.value) for c in out["categories"]] == [("Teologi", 1), ("Sejarah Gereja", 1)]
    # first loan is 1 day late: not yet critical
    assert out["critical_overdues"] == []

    clock.advance(days=3)
    critical = Reports(engine).dashboard()["critical_overdues"]
    assert [(c.loan_id, c.name, c.title, c.days) for c in critical] == [
        (first.id, "Yohanes Papare", "Tafsir Injil Matius", 4)]


def test_critical_overdue_five_days_late(engine, book, member, clock):
    loan = engine.checkout(book.id, member.id)
    now = loan.due_date + timedelta(days=5)
    critical = Reports(engine).dashboard(now)["critical_overdues"]
    assert len(critical) == 1
    assert critical[0].days == 5


def test_loan_views_fall_back_to_unknown(catalog, engine, book, member, clock):
    loan = engine.checkout(book.id, member.id)
    catalog.delete_member(member.id)
    catalog.delete_book(book.id)
    clock.advance(days=8)

    (view,) = Reports(engine).loans("active")
    assert view.id == loan.id
    assert view.member_name == "Unknown"
    assert view.book_title == "Unknown"
    assert view.status == LoanStatus.OVERDUE
    assert view.days_late == 1
    assert Reports(engine).loans("history") == []


def test_loan_views_tabs_and_order(catalog, engine, member, clock):
    b = catalog.add_book(BookCreate(title="T", author="A", stock=3))
    older = engine.checkout(b.id, member.id)
    clock.advance(hours=1)
    newer = engine.checkout(b.id, member.id)
    clock.advance(hours=1)
    engine.return_loan(older.id)
    third = engine.checkout(b.id, member.id)

    assert [v.id for v in Reports(engine).loans("active")] == [third.id, newer.id]
    assert [v.id for v in Reports(engine).loans("history")] == [older.id]
    assert [v.id for v in Reports(engine).loans()] == [third.id, newer.id, older.id]


def test_to_csv_quotes_every_value():
    rows = [{"id": "1", "title": 'The "Word"', "stock": 2}, {"id": "2", "title": "A, B", "stock": 1}]
    assert to_csv(rows) == (
        '"id","title","stock"\n'
        '"1","The ""Word""","2"\n'
        '"2","A, B","1"\n'
    )
    assert to_csv([]) == ""


def test_export_collection(engine, book):
    text = Reports(engine).export_csv(BOOKS)
    header, line = text.splitlines()
    assert header.startswith('"id","isbn","title"')
    assert '"Tafsir Injil Matius"' in line


def test_dashboard_accepts_naive_now(engine, book, member):
    loan = engine.checkout(book.id, member.id)
    naive = loan.due_date.replace(tzinfo=None) + timedelta(days=4)

    out = Reports(engine).dashboard(naive)
    assert out["stats"].overdue_loans == 1
    assert [c.days for c in out["critical_overdues"]] == [4]
    assert [v.days_late for v in Reports(engine).loans(now=naive)] == [4]


def test_to_csv_header_is_union_of_keys():
    rows = [{"id": "1", "title": "T"}, {"id": "2", "title": "U", "returnDate": "2024-03-01"}]
    assert to_csv(rows) == (
        '"id","title","returnDate"\n'
        '"1","T",""\n'
        '"2","U","2024-03-01"\n'
    )
