import hashlib
import hmac
import secrets

PBKDF2_ITERATIONS = 100000


def hash_password(password: str) -> str:
    """PBKDF2-SHA256 password hashing with a random salt."""
    salt = secrets.token_hex(16)
    key = hashlib.pbkdf2_hmac('sha256', password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"{salt}:{key.hex()}"


def verify_password(stored: str, provided: str) -> bool:
    """Verify a password against its hash."""
    try:
        salt, key_hex = stored.split(":")
    except (AttributeError, ValueError):
        return False
    key = hashlib.pbkdf2_hmac('sha256', provided.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return hmac.compare_digest(key.hex(), key_hex)
