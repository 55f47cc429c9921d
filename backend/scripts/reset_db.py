import sys
import os
sys.path.append(os.getcwd())

from sqlalchemy import MetaData, text
from newsflow.core.config import settings
from newsflow.db.base import Base
from newsflow.db.session import make_engine


def reset_db():
    print("Resetting database...")
    engine = make_engine(settings.SQLALCHEMY_DATABASE_URI)

    # Reflect all tables to drop everything, not just known models
    meta = MetaData()
    meta.reflect(bind=engine)

    print(f"Dropping tables: {[t.name for t in meta.sorted_tables]}")
    meta.drop_all(bind=engine)

    with engine.connect() as conn:
        conn.execute(text("DROP TABLE IF EXISTS alembic_version"))
        conn.commit()

    print("Creating all tables...")
    Base.metadata.create_all(bind=engine)
    print("Database reset complete.")


if __name__ == "__main__":
    reset_db()
