"""Book catalog and member registry.

Plain collection replacements. Nothing here cascades into loans: deleting a
book or member leaves loans pointing at an id that no longer resolves.
``available`` is never taken from the caller; a stock change moves it by
the same amount so outstanding loans stay accounted for.
"""

import logging
from typing import List, Optional

from library_app.core.exceptions import InvalidInput, NotFound
from library_app.core.store import BOOKS, MEMBERS, EntityStore
from library_app.schemas.schemas import Book, BookCreate, BookUpdate, Member, MemberCreate, MemberUpdate, to_record
from library_app.services import validation
from library_app.services.circulation import WRITE_LOCK, outstanding_count, next_id, utcnow, CirculationEngine

logger = logging.getLogger("library.catalog")

MAX_YEAR = 9999


class Catalog:

    def __init__(self, store: EntityStore, clock=utcnow, lock=WRITE_LOCK):
        self.store = store
        self.clock = clock
        self.lock = lock
        self.circulation = CirculationEngine(store, clock=clock, lock=lock)

    # -----------------------------
    # Books
    # -----------------------------
    def list_books(self, q: Optional[str] = None) -> List[Book]:
        books = self.circulation.books()
        if not q:
            return books
        term = q.lower()
        return [b for b in books
                if term in b.title.lower()
                or term in b.author.lower()
                or q in b.isbn
                or term in b.category.value.lower()]

    def get_book(self, book_id: str) -> Book:
        book = next((b for b in self.circulation.books() if b.id == book_id), None)
        if book is None:
            raise NotFound(f"Book {book_id} not found")
        return book

    def add_book(self, book_in: BookCreate) -> Book:
        title = validation.require_text(book_in.title, "Title")
        author = validation.require_text(book_in.author, "Author")
        validation.check_range(book_in.stock, "Stock", 1)
        validation.check_range(book_in.year, "Year", 0, MAX_YEAR)
        with self.lock:
            books = self.circulation.books()
            # ids still referenced by loans stay reserved after their book is deleted
            taken = [b.id for b in books] + [l.book_id for l in self.circulation.loans()]
            book = Book(
                id=next_id(taken, self.clock()),
                isbn=book_in.isbn.strip(),
                title=title,
                author=author,
                publisher=book_in.publisher.strip(),
                year=book_in.year,
                category=book_in.category,
                stock=book_in.stock,
                available=book_in.stock,
            )
            books.append(book)
            self.store.put(BOOKS, [to_record(b) for b in books])
        logger.info(f"Created book id={book.id} title={book.title}")
        return book

    def update_book(self, book_id: str, book_upd: BookUpdate) -> Book:
        # null means "leave unchanged"
        data = book_upd.model_dump(exclude_unset=True, exclude_none=True)
        for field in ("title", "author"):
            if field in data:
                data[field] = validation.require_text(data[field], field.capitalize())
        if "year" in data:
            validation.check_range(data["year"], "Year", 0, MAX_YEAR)
        with self.lock:
            books = self.circulation.books()
            book = next((b for b in books if b.id == book_id), None)
            if book is None:
                raise NotFound(f"Book {book_id} not found")
            if "stock" in data:
                new_stock = validation.check_range(data.pop("stock"), "Stock", 0)
                lent = outstanding_count(book.id, self.circulation.loans())
                if new_stock < lent:
                    raise InvalidInput(f"Stock cannot drop below the {lent} copies currently on loan")
                book.available = max(0, min(new_stock, book.available + new_stock - book.stock))
                book.stock = new_stock
            for k, v in data.items():
                setattr(book, k, v.strip() if isinstance(v, str) else v)
            self.store.put(BOOKS, [to_record(b) for b in books])
        logger.info(f"Updated book id={book.id}")
        return book

    def delete_book(self, book_id: str) -> None:
        with self.lock:
            books = self.circulation.books()
            remaining = [b for b in books if b.id != book_id]
            if len(remaining) == len(books):
                raise NotFound(f"Book {book_id} not found")
            self.store.put(BOOKS, [to_record(b) for b in remaining])
        logger.info(f"Deleted book id={book_id}")

    def reconcile_book(self, book_id: str) -> Book:
        """Recompute ``available`` as stock minus copies on loan."""
        with self.lock:
            books = self.circulation.books()
            book = next((b for b in books if b.id == book_id), None)
            if book is None:
                raise NotFound(f"Book {book_id} not found")
            lent = outstanding_count(book.id, self.circulation.loans())
            before = book.available
            book.available = max(0, min(book.stock, book.stock - lent))
            self.store.put(BOOKS, [to_record(b) for b in books])
        if before != book.available:
            logger.warning(f"Reconciled book id={book.id} available {before} -> {book.available}")
        return book

    # -----------------------------
    # Members
    # -----------------------------
    def list_members(self, q: Optional[str] = None) -> List[Member]:
        members = self.circulation.members()
        if not q:
            return members
        term = q.lower()
        return [m for m in members if term in m.name.lower() or term in m.id.lower()]

    def get_member(self, member_id: str) -> Member:
        member = next((m for m in self.circulation.members() if m.id == member_id), None)
        if member is None:
            raise NotFound(f"Member {member_id} not found")
        return member

    def register_member(self, member_in: MemberCreate) -> Member:
        email = validation.check_email(member_in.email.strip())
        name = validation.require_text(member_in.name, "Name")
        with self.lock:
            members = self.circulation.members()
            member_id = validation.admit_member_id(member_in.id, (m.id for m in members))
            member = Member(
                id=member_id,
                name=name,
                email=email,
                phone=member_in.phone.strip(),
                type=member_in.type,
                join_date=member_in.join_date or self.clock().date(),
            )
            members.append(member)
            self.store.put(MEMBERS, [to_record(m) for m in members])
        logger.info(f"Registered member id={member.id} email={member.email}")
        return member

    def update_member(self, member_id: str, member_upd: MemberUpdate) -> Member:
        """Edit a member's details; the id itself is fixed once registered."""
        data = member_upd.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in data:
            data["name"] = validation.require_text(data["name"], "Name")
        if "email" in data:
            data["email"] = validation.check_email(data["email"].strip())
        if "phone" in data:
            data["phone"] = data["phone"].strip()
        with self.lock:
            members = self.circulation.members()
            member = next((m for m in members if m.id == member_id), None)
            if member is None:
                raise NotFound(f"Member {member_id} not found")
            for k, v in data.items():
                setattr(member, k, v)
            self.store.put(MEMBERS, [to_record(m) for m in members])
        logger.info(f"Updated member id={member.id}")
        return member

    def delete_member(self, member_id: str) -> None:
        with self.lock:
            members = self.circulation.members()
            remaining = [m for m in members if m.id != member_id]
            if len(remaining) == len(members):
                raise NotFound(f"Member {member_id} not found")
            self.store.put(MEMBERS, [to_record(m) for m in remaining])
        logger.info(f"Deleted member id={member_id}")
