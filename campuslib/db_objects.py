"""
Database-side guards created at startup.

The stock guard keeps ``0 <= available <= quantity`` on ``books`` even for
writes that bypass the service layer.
"""
from sqlalchemy import text
from campuslib.extensions import db

SQLITE_STOCK_GUARD = [
    """
    CREATE TRIGGER IF NOT EXISTS trg_books_stock_guard_insert
    BEFORE INSERT ON books
    WHEN NEW.available < 0 OR NEW.available > NEW.quantity
    BEGIN
        SELECT RAISE(ABORT, 'available out of range');
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS trg_books_stock_guard_update
    BEFORE UPDATE OF available, quantity ON books
    WHEN NEW.available < 0 OR NEW.available > NEW.quantity
    BEGIN
        SELECT RAISE(ABORT, 'available out of range');
    END
    """,
]

MSSQL_STOCK_GUARD = r"""
IF OBJECT_ID(N'dbo.trg_books_stock_guard', N'TR') IS NULL
BEGIN
    EXEC('
    CREATE TRIGGER dbo.trg_books_stock_guard
    ON dbo.books
    AFTER INSERT, UPDATE
    AS
    BEGIN
        SET NOCOUNT ON;
        IF EXISTS (SELECT 1 FROM inserted WHERE available < 0 OR available > quantity)
        BEGIN
            RAISERROR(''available out of range'', 16, 1);
            ROLLBACK TRANSACTION;
        END
    END
    ')
END
"""


def ensure_db_objects(app):
    """Creates tables plus the dialect-specific triggers/indexes."""
    with app.app_context():
        db.create_all()

        dialect = db.engine.dialect.name
        if dialect == "sqlite":
            statements = SQLITE_STOCK_GUARD
        elif dialect == "mssql":
            statements = [MSSQL_STOCK_GUARD]
        else:
            app.logger.info(f"[db_objects] no extra objects for dialect={dialect}")
            return

        with db.engine.begin() as conn:
            for sql in statements:
                conn.execute(text(sql))
        app.logger.info(f"[db_objects] ensured {len(statements)} object(s) for dialect={dialect}")
