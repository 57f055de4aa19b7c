"""Database initialization script with seed data."""

from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from wealth.database import Base, SessionLocal, engine
from wealth.models import Transaction
from wealth.services.imports.transaction_import_service import TransactionImportService
from wealth.services.ledger.sql_ledger_store import SqlLedgerStore
from wealth.services.repositories import PriceRepository, SecurityRepository

DEMO_CSV = """tdate,ttype,isin,symbol,name,qty,price,fees,account
2024-01-15,BUY,US0378331005,AAPL,Apple Inc.,10,185.20,1.00,Brokerage
2024-02-01,BUY,US5949181045,MSFT,Microsoft Corporation,5,403.80,1.00,Brokerage
2024-03-12,BUY,US78462F1035,SPY,SPDR S&P 500 ETF Trust,8,512.40,1.50,Retirement
2024-04-02,BUY,US0378331005,AAPL,Apple Inc.,5,169.10,1.00,Brokerage
2024-05-16,DIVIDEND,US0378331005,AAPL,Apple Inc.,0,0,0,Brokerage
2024-06-20,SELL,US0378331005,AAPL,Apple Inc.,8,209.70,1.00,Brokerage
2024-09-05,SELL,US5949181045,MSFT,Microsoft Corporation,2,408.40,1.00,Brokerage
"""

DEMO_PRICES = {
    "AAPL": Decimal("226.40"),
    "MSFT": Decimal("417.10"),
    "SPY": Decimal("572.30"),
}


def create_tables():
    """Create all database tables."""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("Tables created successfully!")


def seed_data(db: Session):
    """Seed the database with a small demo ledger and closing prices."""
    print("\nSeeding database with sample data...")

    print("Importing demo transactions...")
    outcome = TransactionImportService(SqlLedgerStore(db)).import_transactions(
        DEMO_CSV, dry_run=False
    )
    for error in outcome.errors:
        print(f"  Row {error.row} skipped: {error.message}")

    print("Creating closing prices...")
    securities = SecurityRepository(db)
    prices = PriceRepository(db)
    yesterday = date.today() - timedelta(days=1)
    for symbol, close in DEMO_PRICES.items():
        security = securities.find_by_symbol(symbol)
        if security:
            prices.upsert(security.id, yesterday, close, source="seed")
    db.commit()

    print("Seed data created successfully!")
    print(f"  Transactions: {outcome.inserted} (batch {outcome.batch_id})")
    print(f"  Prices: {len(DEMO_PRICES)} on {yesterday.isoformat()}")


def init_db():
    """Initialize database with tables and seed data."""
    print("Initializing database...")

    # Create tables
    create_tables()

    # Seed data
    db = SessionLocal()
    try:
        # Check if data already exists
        existing = db.query(Transaction).count()
        if existing > 0:
            print(f"\nDatabase already has {existing} transactions. Skipping seed data.")
            return

        seed_data(db)
        print("\nDatabase initialization complete!")

    except Exception as e:
        print(f"\nError during database initialization: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
