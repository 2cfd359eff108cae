import argparse
from datetime import date

from library_app.core.config import logger
from library_app.core.database import Base, SessionLocal, engine
from library_app.core.store import BOOKS, MEMBERS, SqlEntityStore
from library_app.schemas.schemas import BookCreate, Category, MemberCreate, MemberType
from library_app.services.catalog import Catalog
from library_app.services.circulation import CirculationEngine

SAMPLE_BOOKS = [
    BookCreate(isbn="978-0123456789", title="Sistematika Teologi Vol 1", author="Louis Berkhof",
               publisher="Momentum", year=2010, category=Category.THEOLOGY, stock=5),
    BookCreate(isbn="978-9876543210", title="Tafsir Injil Matius", author="Matthew Henry",
               publisher="BPK Gunung Mulia", year=2005, category=Category.BIBLICAL_STUDIES, stock=3),
    BookCreate(isbn="978-1122334455", title="Sejarah Gereja Asia", author="Dr. Anne R",
               publisher="Kanisius", year=2018, category=Category.HISTORY, stock=2),
]

SAMPLE_MEMBERS = [
    MemberCreate(id="MHS2023001", name="Yohanes Papare", type=MemberType.STUDENT,
                 email="yohanes@stt.ac.id", phone="08123456789", join_date=date(2023, 8, 1)),
    MemberCreate(id="DSN001", name="Dr. Paulus W", type=MemberType.LECTURER,
                 email="paulus@stt.ac.id", phone="08129876543", join_date=date(2020, 1, 15)),
]


def seed(store) -> None:
    """Add sample books, members and one open loan to empty collections."""
    catalog = Catalog(store)
    if not store.get(BOOKS):
        for book_in in SAMPLE_BOOKS:
            catalog.add_book(book_in)
    if not store.get(MEMBERS):
        for member_in in SAMPLE_MEMBERS:
            catalog.register_member(member_in)
        first_book = store.get(BOOKS)[0]["id"]
        CirculationEngine(store).checkout(first_book, SAMPLE_MEMBERS[0].id)
    logger.info('Seeded sample data')


def main(argv=None):
    parser = argparse.ArgumentParser(description='Library circulation utilities')
    parser.add_argument('--initdb', action='store_true', help='Create tables')
    parser.add_argument('--seed', action='store_true', help='Seed sample data')
    args = parser.parse_args(argv)
    Base.metadata.create_all(bind=engine)
    if args.seed:
        db = SessionLocal()
        try:
            seed(SqlEntityStore(db))
        finally:
            db.close()
    print('Done')


if __name__ == '__main__':
    main()
