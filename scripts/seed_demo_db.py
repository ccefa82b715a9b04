#!/usr/bin/env python3
"""
Create a local SQLite database whose schema exercises every part of a
table definition document: sized strings, decimals, boolean flags,
CHECK-derived enums, foreign keys with referential actions, unique and
secondary indexes, and the common created_at/updated_at columns.
Usage (from the repository root):
    python scripts/seed_demo_db.py
    DATABASE_URL=sqlite:///scripts/demo.db tabledoc generate
Creates: scripts/demo.db
"""
import sqlite3
import random
from datetime import datetime, timedelta
from pathlib import Path

DB_PATH = Path(__file__).parent / "demo.db"

DDL = [
    """
    CREATE TABLE IF NOT EXISTS customers (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        name        VARCHAR(100) NOT NULL,
        email       VARCHAR(255) UNIQUE NOT NULL,
        country     CHAR(2),
        is_active   BOOLEAN NOT NULL DEFAULT 1,
        created_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    """
    CREATE TABLE IF NOT EXISTS products (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        sku         VARCHAR(16) UNIQUE NOT NULL,
        name        VARCHAR(200) NOT NULL,
        category    VARCHAR(20) CHECK (category IN ('ELECTRONICS','CLOTHING','BOOKS','HOME','SPORTS')),
        price       NUMERIC(10, 2) NOT NULL CHECK (price >= 0),
        is_published BOOLEAN DEFAULT 0,
        created_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    """
    CREATE TABLE IF NOT EXISTS orders (
        id              INTEGER PRIMARY KEY AUTOINCREMENT,
        customer_id     INTEGER NOT NULL REFERENCES customers(id) ON DELETE CASCADE,
        status          VARCHAR(12) NOT NULL DEFAULT 'PENDING'
                        CHECK (status IN ('PENDING','SHIPPED','CANCELLED','DELIVERED')),
        total_amount    NUMERIC(12, 2),
        created_at      TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        deleted_at      TIMESTAMP
    )""",
    "CREATE INDEX IF NOT EXISTS ix_orders_status ON orders (status)",
    """
    CREATE TABLE IF NOT EXISTS order_items (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        order_id    INTEGER NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
        product_id  INTEGER NOT NULL REFERENCES products(id) ON DELETE RESTRICT,
        quantity    SMALLINT NOT NULL CHECK (quantity > 0),
        unit_price  NUMERIC(10, 2) NOT NULL
    )""",
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_order_items_line ON order_items (order_id, product_id)",
    # listed in the default EXCLUDE_TABLES
    "CREATE TABLE IF NOT EXISTS migrations (id INTEGER PRIMARY KEY, name VARCHAR(255), applied_at TIMESTAMP)",
]

STATUSES = ['PENDING', 'SHIPPED', 'CANCELLED', 'DELIVERED']
CATEGORIES = ['ELECTRONICS', 'CLOTHING', 'BOOKS', 'HOME', 'SPORTS']

def seed():
    conn = sqlite3.connect(DB_PATH)
    cur  = conn.cursor()

    for stmt in DDL:
        cur.execute(stmt)

    # customers (20)
    for i in range(1, 21):
        cur.execute("INSERT OR IGNORE INTO customers(name, email, country, is_active) VALUES (?,?,?,?)",
                    (f"Customer {i}", f"user{i}@example.com",
                     random.choice(["US", "UK", "DE", "IN", "JP"]), random.random() > 0.1))

    # products (10)
    for i in range(1, 11):
        cur.execute("INSERT OR IGNORE INTO products(sku, name, category, price, is_published) VALUES (?,?,?,?,?)",
                    (f"SKU-{i:04d}", f"Product {i}", random.choice(CATEGORIES),
                     round(random.uniform(5, 500), 2), i % 3 != 0))

    # orders + order_items (50 orders)
    for _ in range(50):
        order_dt = datetime.now() - timedelta(days=random.randint(0, 365))
        cur.execute("INSERT INTO orders(customer_id, status, created_at) VALUES (?,?,?)",
                    (random.randint(1, 20), random.choice(STATUSES), order_dt))
        order_id = cur.lastrowid

        total = 0
        for product_id in random.sample(range(1, 11), random.randint(1, 3)):
            qty   = random.randint(1, 5)
            price = round(random.uniform(5, 500), 2)
            total += qty * price
            cur.execute("INSERT INTO order_items(order_id, product_id, quantity, unit_price) VALUES (?,?,?,?)",
                        (order_id, product_id, qty, price))

        cur.execute("UPDATE orders SET total_amount=? WHERE id=?", (round(total, 2), order_id))

    conn.commit()
    conn.close()
    print(f"✅ Demo database seeded: {DB_PATH}")
    print("   Tables: customers, products, orders, order_items, migrations")

if __name__ == "__main__":
    seed()
