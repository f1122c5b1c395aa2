from __future__ import annotations

import re
import secrets
import string
from typing import NamedTuple, Optional

# ใช้ werkzeug เป็นมาตรฐาน (PBKDF2) และรองรับ bcrypt เพื่อความเข้ากันได้ย้อนหลัง
import bcrypt
from werkzeug.security import check_password_hash, generate_password_hash

from config.settings import settings
from core.errors import ValidationError

HASH_METHOD = "pbkdf2:sha256"

# สัญลักษณ์ที่นับว่าเป็น "special character" ตอนตรวจความแข็งแรง
PASSWORD_SYMBOLS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"
# ชุดที่ใช้สุ่มรหัสชั่วคราว (ไม่มีตัวที่พิมพ์ยากบนมือถือ)
TEMP_PASSWORD_SYMBOLS = "!@#$%^&*"

# pbkdf2:<digest>:<iterations>$<salt>$<hex key>
_PBKDF2_PREFIX = re.compile(r"^pbkdf2:[a-z0-9_]+:(\d+)\$")


class PasswordCheck(NamedTuple):
    is_valid: bool
    message: Optional[str] = None


def is_bcrypt_hash(h: Optional[str]) -> bool:
    return isinstance(h, str) and h.startswith(("$2a$", "$2b$", "$2y$"))


def max_iterations() -> int:
    return settings.PBKDF2_ITERATIONS * 10


def pbkdf2_iterations(h: Optional[str]) -> Optional[int]:
    """Iteration count from a werkzeug ``pbkdf2:<digest>:<n>$...`` hash, or None."""
    if not isinstance(h, str):
        return None
    m = _PBKDF2_PREFIX.match(h)
    return int(m.group(1)) if m else None


def hash_password(password: str) -> str:
    """
    สร้างแฮชมาตรฐานเดียวกับระบบ (PBKDF2-SHA256 ของ werkzeug)
    iterations มาจาก settings และ salt ใหม่ทุกครั้ง
    """
    return generate_password_hash(
        password or "",
        method=f"{HASH_METHOD}:{settings.PBKDF2_ITERATIONS}",
        salt_length=settings.PBKDF2_SALT_BYTES,
    )


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """
    ตรวจรหัสผ่าน:
    - ถ้าเป็น bcrypt (เริ่มด้วย $2a$/$2b$/$2y$) จะตรวจด้วย bcrypt เพื่อรองรับข้อมูลเก่า
    - มิฉะนั้นตรวจด้วย werkzeug
    แฮชที่เสียรูปคืน False เสมอ ไม่ raise
    """
    if not password_hash or not isinstance(password_hash, str):
        return False

    if is_bcrypt_hash(password_hash):
        try:
            return bcrypt.checkpw((password or "").encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            return False

    if password_hash.startswith("pbkdf2:"):
        iterations = pbkdf2_iterations(password_hash)
        # ไม่ยอมให้ข้อมูลในฐานข้อมูลสั่งให้ derive นานเกินเหตุ
        if iterations is None or not 0 < iterations <= max_iterations():
            return False
    elif not password_hash.startswith("scrypt:"):
        return False

    try:
        return check_password_hash(password_hash, password or "")
    except (ValueError, TypeError, OverflowError):
        return False


def needs_rehash(password_hash: Optional[str]) -> bool:
    iterations = pbkdf2_iterations(password_hash)
    if iterations is None or not password_hash.startswith(f"{HASH_METHOD}:"):
        return True
    return iterations < settings.PBKDF2_ITERATIONS


def validate_password_strength(password: str) -> PasswordCheck:
    password = password or ""
    if len(password) < 8:
        return PasswordCheck(False, "Password must be at least 8 characters long")
    if not re.search(r"[A-Z]", password):
        return PasswordCheck(False, "Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        return PasswordCheck(False, "Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        return PasswordCheck(False, "Password must contain at least one number")
    if not any(ch in PASSWORD_SYMBOLS for ch in password):
        return PasswordCheck(False, "Password must contain at least one special character")
    return PasswordCheck(True)


def generate_temporary_password(length: Optional[int] = None) -> str:
    length = settings.TEMP_PASSWORD_LENGTH if length is None else length
    pools = (string.ascii_uppercase, string.ascii_lowercase, string.digits, TEMP_PASSWORD_SYMBOLS)
    if length < len(pools):
        raise ValidationError(f"Temporary password length must be at least {len(pools)}")

    all_chars = "".join(pools)
    chars = [secrets.choice(pool) for pool in pools]
    chars += [secrets.choice(all_chars) for _ in range(length - len(pools))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
