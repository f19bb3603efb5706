"""
Seed script: creates a demo user, customers and invoices.
Run from the project root: python -m scripts.seed
"""
import asyncio
import sys
import os
import uuid
from datetime import date

# Ensure the project root is on sys.path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from dashboard.database import get_session_factory, close_db
from dashboard.models.user import User
from dashboard.models.customer import Customer
from dashboard.models.invoice import Invoice
from dashboard.services.identity import hash_password

# ---------- Fixed UUIDs ----------

USER_ADMIN_ID = uuid.UUID("410544b2-4001-4271-9855-fec4b6a6442a")

CUSTOMER_EVIL_ID = uuid.UUID("d6e15727-9fe1-4961-8c5b-ea44a9bd81aa")
CUSTOMER_DELBA_ID = uuid.UUID("3958dc9e-712f-4377-85e9-fec4b6a6442a")
CUSTOMER_LEE_ID = uuid.UUID("3958dc9e-742f-4377-85e9-fec4b6a6442a")
CUSTOMER_MICHAEL_ID = uuid.UUID("76d65c26-f784-44a2-ac19-586678f7c2f2")

DEFAULT_PASSWORD = "123456"


async def seed():
    async with get_session_factory()() as db:
        result = await db.execute(select(User).where(User.id == USER_ADMIN_ID))
        if result.scalar_one_or_none():
            print("Seed data already exists. Skipping.")
            return

        db.add(User(id=USER_ADMIN_ID, name="User", email="user@nextmail.com",
                    password=hash_password(DEFAULT_PASSWORD)))

        customers = [
            Customer(id=CUSTOMER_EVIL_ID, name="Evil Rabbit", email="evil@rabbit.com",
                     image_url="/customers/evil-rabbit.png"),
            Customer(id=CUSTOMER_DELBA_ID, name="Delba de Oliveira", email="delba@oliveira.com",
                     image_url="/customers/delba-de-oliveira.png"),
            Customer(id=CUSTOMER_LEE_ID, name="Lee Robinson", email="lee@robinson.com",
                     image_url="/customers/lee-robinson.png"),
            Customer(id=CUSTOMER_MICHAEL_ID, name="Michael Novotny", email="michael@novotny.com",
                     image_url="/customers/michael-novotny.png"),
        ]
        db.add_all(customers)
        await db.flush()

        invoices = [
            Invoice(customer_id=CUSTOMER_EVIL_ID, amount=15795, status="pending", date=date(2022, 12, 6)),
            Invoice(customer_id=CUSTOMER_DELBA_ID, amount=20348, status="pending", date=date(2022, 11, 14)),
            Invoice(customer_id=CUSTOMER_LEE_ID, amount=3040, status="paid", date=date(2022, 10, 29)),
            Invoice(customer_id=CUSTOMER_MICHAEL_ID, amount=44800, status="paid", date=date(2023, 9, 10)),
            Invoice(customer_id=CUSTOMER_EVIL_ID, amount=666, status="pending", date=date(2023, 6, 27)),
            Invoice(customer_id=CUSTOMER_LEE_ID, amount=32545, status="paid", date=date(2023, 6, 9)),
        ]
        db.add_all(invoices)

        await db.commit()
        print("Seed data inserted successfully!")
        print(f"  Users: 1 (user@nextmail.com / {DEFAULT_PASSWORD})")
        print(f"  Customers: {len(customers)}")
        print(f"  Invoices: {len(invoices)}")


async def main():
    try:
        await seed()
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
