"""
Identity Service - accounts, sign-in and sign-out.

Accounts live apart from profiles: an account is just e-mail + password
hash under a uid; the profile (role, department, marks ...) is stored in
the `users` collection under the same uid.

The unique index on accounts.email is the one authoritative duplicate
check. Bulk import pre-checks with existing_emails() to skip known rows
early, but a race still ends in DuplicateAccountError here.
"""

import logging
from typing import Iterable, Set

from pymongo.errors import DuplicateKeyError

from campus_portal.core.auth import hash_password, verify_password, create_access_token, decode_token
from campus_portal.core.errors import AuthenticationError, DuplicateAccountError, PortalValidationError
from campus_portal.db.mongodb import COLLECTIONS
from campus_portal.services.document_store import DocumentStore
from campus_portal.utils.dates import utcnow

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class IdentityService:

    def __init__(self):
        self.accounts = DocumentStore(COLLECTIONS["accounts"], "Account")
        self.revoked = DocumentStore(COLLECTIONS["revoked_tokens"], "Token")

    def create_account(self, email: str, password: str) -> str:
        """Create credentials. Returns the new uid."""
        email = normalize_email(email)
        if not email or "@" not in email:
            raise PortalValidationError(f"Invalid e-mail address: '{email}'")
        if not password:
            raise PortalValidationError("Password is required")

        if self.accounts.find_one({"email": email}):
            raise DuplicateAccountError(f"Email already registered: {email}")
        try:
            uid = self.accounts.create({
                "email": email,
                "password_hash": hash_password(password),
                "created_at": utcnow(),
            })
        except DuplicateKeyError:
            raise DuplicateAccountError(f"Email already registered: {email}")

        logger.info("Created account %s for %s", uid, email)
        return uid

    def delete_account(self, uid: str) -> None:
        self.accounts.delete(uid)
        logger.info("Deleted account %s", uid)

    def existing_emails(self, emails: Iterable[str]) -> Set[str]:
        wanted = sorted({normalize_email(e) for e in emails if e})
        if not wanted:
            return set()
        found = self.accounts.get_all({"email": {"$in": wanted}})
        return {doc["email"] for doc in found}

    def sign_in(self, email: str, password: str) -> str:
        """Verify credentials and issue a JWT. Same error for unknown e-mail and bad password."""
        account = self.accounts.find_one({"email": normalize_email(email)})
        if not account or not verify_password(password, account["password_hash"]):
            raise AuthenticationError("Invalid email or password")
        return create_access_token(data={"sub": account["id"]})

    def sign_out(self, token: str) -> None:
        payload = decode_token(token)
        if not payload or not payload.get("jti"):
            raise AuthenticationError("Invalid or expired token")
        if not self.is_revoked(payload["jti"]):
            self.revoked.create({"jti": payload["jti"], "revoked_at": utcnow()})

    def is_revoked(self, jti: str) -> bool:
        return self.revoked.find_one({"jti": jti}) is not None


def get_identity_service() -> IdentityService:
    return IdentityService()
