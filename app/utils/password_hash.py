"""
Password hashing for user accounts (bcrypt).

Clients may send either an already computed ``password_hash`` (stored as
is) or a plain ``password``, which is hashed here before it reaches the
domain layer.

Usage:
    from app.utils.password_hash import hash_password

    hashed = hash_password("correct horse")
"""
import bcrypt

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def hash_password(plaintext: str) -> str:
    """
    Hash a user password with a fresh salt.

    Raises:
        ValueError: If the password is empty or longer than 72 bytes
    """
    if not plaintext:
        raise ValueError("Cannot hash empty password")

    password_bytes = plaintext.encode('utf-8')
    if len(password_bytes) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password exceeds {MAX_PASSWORD_BYTES} bytes")

    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode('utf-8')

