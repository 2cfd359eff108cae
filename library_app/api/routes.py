from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session
from typing import List, Optional

from library_app.core.database import get_db
from library_app.core.exceptions import (AlreadyReturned, DuplicateMemberId, InvalidEmail, InvalidInput,
                                         LibraryError, NotFound, OutOfStock)
from library_app.core.store import COLLECTIONS, SqlEntityStore
from library_app.schemas import schemas
from library_app.services.assistant import LibrarianAssistant
from library_app.services.catalog import Catalog
from library_app.services.circulation import CirculationEngine
from library_app.services.reports import Reports

router = APIRouter()

STATUS_CODES = {
    NotFound: 404,
    OutOfStock: 409,
    AlreadyReturned: 409,
    DuplicateMemberId: 409,
    InvalidEmail: 422,
    InvalidInput: 422,
}


def http_error(e: LibraryError) -> HTTPException:
    return HTTPException(status_code=STATUS_CODES.get(type(e), 400), detail=str(e))


def get_store(db: Session = Depends(get_db)):
    return SqlEntityStore(db)


def get_catalog(store=Depends(get_store)):
    return Catalog(store)


def get_engine(store=Depends(get_store)):
    return CirculationEngine(store)


def get_assistant():
    return LibrarianAssistant()


# -----------------------------
# Books
# -----------------------------
@router.get("/books/", response_model=List[schemas.Book])
def list_books(q: Optional[str] = Query(None, description="search title, author, ISBN or category"),
               catalog: Catalog = Depends(get_catalog)):
    return catalog.list_books(q)


@router.post("/books/", response_model=schemas.Book, status_code=201)
def create_book(book_in: schemas.BookCreate, catalog: Catalog = Depends(get_catalog)):
    try:
        return catalog.add_book(book_in)
    except LibraryError as e:
        raise http_error(e)


@router.get("/books/{book_id}", response_model=schemas.Book)
def read_book(book_id: str, catalog: Catalog = Depends(get_catalog)):
    try:
        return catalog.get_book(book_id)
    except LibraryError as e:
        raise http_error(e)


@router.put("/books/{book_id}", response_model=schemas.Book)
def update_book(book_id: str, book_upd: schemas.BookUpdate, catalog: Catalog = Depends(get_catalog)):
    try:
        return catalog.update_book(book_id, book_upd)
    except LibraryError as e:
        raise http_error(e)


@router.delete("/books/{book_id}")
def delete_book(book_id: str, catalog: Catalog = Depends(get_catalog)):
    try:
        catalog.delete_book(book_id)
    except LibraryError as e:
        raise http_error(e)
    return {"ok": True}


@router.post("/books/{book_id}/reconcile", response_model=schemas.Book)
def reconcile_book(book_id: str, catalog: Catalog = Depends(get_catalog)):
    try:
        return catalog.reconcile_book(book_id)
    except LibraryError as e:
        raise http_error(e)


# -----------------------------
# Members
# -----------------------------
@router.get("/members/", response_model=List[schemas.Member])
def list_members(q: Optional[str] = Query(None, description="search name or member id"),
                 catalog: Catalog = Depends(get_catalog)):
    return catalog.list_members(q)


@router.post("/members/", response_model=schemas.Member, status_code=201)
def register_member(member_in: schemas.MemberCreate, catalog: Catalog = Depends(get_catalog)):
    try:
        return catalog.register_member(member_in)
    except LibraryError as e:
        raise http_error(e)


@router.get("/members/{member_id}", response_model=schemas.Member)
def read_member(member_id: str, catalog: Catalog = Depends(get_catalog)):
    try:
        return catalog.get_member(member_id)
    except LibraryError as e:
        raise http_error(e)


@router.put("/members/{member_id}", response_model=schemas.Member)
def update_member(member_id: str, member_upd: schemas.MemberUpdate, catalog: Catalog = Depends(get_catalog)):
    try:
        return catalog.update_member(member_id, member_upd)
    except LibraryError as e:
        raise http_error(e)


@router.delete("/members/{member_id}")
def delete_member(member_id: str, catalog: Catalog = Depends(get_catalog)):
    try:
        catalog.delete_member(member_id)
    except LibraryError as e:
        raise http_error(e)
    return {"ok": True}


# -----------------------------
# Loans (checkout & return)
# -----------------------------
@router.get("/loans/", response_model=List[schemas.LoanView])
def list_loans(tab: Optional[str] = Query(None, pattern="^(active|history)$"),
               engine: CirculationEngine = Depends(get_engine)):
    return Reports(engine).loans(tab)


@router.post("/loans/checkout", response_model=schemas.Loan, status_code=201)
def checkout(req: schemas.CheckoutRequest, engine: CirculationEngine = Depends(get_engine)):
    try:
        return engine.checkout(req.book_id, req.member_id)
    except LibraryError as e:
        raise http_error(e)


@router.post("/loans/{loan_id}/return", response_model=schemas.Loan)
def return_loan(loan_id: str, engine: CirculationEngine = Depends(get_engine)):
    try:
        return engine.return_loan(loan_id)
    except LibraryError as e:
        raise http_error(e)


# -----------------------------
# Dashboard, export & assistant
# -----------------------------
@router.get("/dashboard", response_model=schemas.DashboardOut)
def dashboard(engine: CirculationEngine = Depends(get_engine)):
    return Reports(engine).dashboard()


@router.get("/export/{collection}.csv")
def export_csv(collection: str, engine: CirculationEngine = Depends(get_engine)):
    if collection not in COLLECTIONS:
        raise HTTPException(status_code=404, detail="Unknown collection")
    content = Reports(engine).export_csv(collection)
    return Response(content=content, media_type="text/csv",
                    headers={"Content-Disposition": f'attachment; filename="{collection}.csv"'})


@router.post("/assistant/ask", response_model=schemas.AskResponse)
def ask_assistant(req: schemas.AskRequest, assistant: LibrarianAssistant = Depends(get_assistant)):
    return {"answer": assistant.ask(req.query)}
