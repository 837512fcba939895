"""
Classification of driver errors raised through SQLAlchemy.
"""
from sqlalchemy.exc import IntegrityError

# MySQL ER_DUP_ENTRY
MYSQL_DUPLICATE_ENTRY = 1062


def is_duplicate_entry(error: IntegrityError) -> bool:
    """
    True when an IntegrityError comes from a primary/unique key collision.

    Other integrity failures (NOT NULL, foreign keys) return False so they
    surface as generic database errors.
    """
    orig = getattr(error, "orig", None)
    args = getattr(orig, "args", ()) or ()

    # MySQL drivers put the error number first
    if args and args[0] == MYSQL_DUPLICATE_ENTRY:
        return True

    message = str(orig if orig is not None else error)
    return "UNIQUE constraint failed" in message or "Duplicate entry" in message
