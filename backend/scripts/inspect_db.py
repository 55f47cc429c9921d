import sys
import os
sys.path.append(os.getcwd())

from sqlalchemy import inspect, text
from newsflow.core.config import settings
from newsflow.db.session import make_engine

TABLES = ["users", "interests", "api_keys", "saved_articles", "admin_logs"]

engine = make_engine(settings.SQLALCHEMY_DATABASE_URI)
inspector = inspect(engine)
existing = inspector.get_table_names()

print("Tables:", existing)

for table in TABLES:
    if table not in existing:
        print(f"'{table}' table not found!")
        continue
    print(f"\nColumns in '{table}':")
    for col in inspector.get_columns(table):
        print(f"- {col['name']} ({col['type']})")

with engine.connect() as conn:
    print()
    for table in TABLES:
        if table in existing:
            cnt = conn.execute(text(f"SELECT count(*) FROM {table}")).scalar()
            print(f"Total {table}: {cnt}")
    if "users" in existing:
        admins = conn.execute(text("SELECT count(*) FROM users WHERE is_admin")).scalar()
        print(f"Admins: {admins}")
