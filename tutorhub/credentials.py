"""
Credential checks for the email/password login.

Only the fixed demo accounts are accepted for now. The login route talks to the
CredentialStore interface, so a real account table can replace the demo store
without touching the access-control code.
"""
from dataclasses import dataclass
from typing import Dict, Optional
import hmac

from passlib.context import CryptContext

from tutorhub.config import Settings, get_settings
from tutorhub.database.database import UserRole

# pbkdf2 needs no native backend
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass(frozen=True)
class Account:
    email: str
    first_name: str
    last_name: str
    role: UserRole


class CredentialStore:
    def verify(self, email: str, password: str) -> Optional[Account]:
        """Return the account for a matching email/password pair, None otherwise."""
        raise NotImplementedError


class DemoCredentialStore(CredentialStore):
    def __init__(self, settings: Settings):
        self._accounts: Dict[str, tuple] = {
            settings.demo_student_email.lower(): (
                settings.demo_student_password,
                Account(settings.demo_student_email, "Demo", "Student", UserRole.STUDENT),
            ),
            settings.demo_admin_email.lower(): (
                settings.demo_admin_password,
                Account(settings.demo_admin_email, "Admin", "User", UserRole.ADMIN),
            ),
        }

    def verify(self, email: str, password: str) -> Optional[Account]:
        entry = self._accounts.get(email.strip().lower())
        if entry is None:
            return None
        expected, account = entry
        if not hmac.compare_digest(expected.encode(), password.encode()):
            return None
        return account


def get_credential_store() -> CredentialStore:
    return DemoCredentialStore(get_settings())


def hash_password(password: str) -> str:
    return pwd_context.hash(password)
