#!/usr/bin/env python3
"""
Seed Administrator Script

Creates the first ADMIN account + profile. Every other account is
provisioned by staff through the API, so this is the only bootstrap step.

Run: python scripts/seed_admin.py admin@college.edu 'S3cret!' "Portal Admin"
"""
import sys
sys.path.insert(0, '.')

from campus_portal.core.errors import PortalError
from campus_portal.db.mongodb import test_mongo_connection, init_mongo_indexes
from campus_portal.schemas.schemas import UserRole
from campus_portal.services.identity_service import IdentityService
from campus_portal.services.user_service import UserService


def seed_admin(email: str, password: str, display_name: str = "Administrator") -> str:
    """Create the admin account and profile. Returns the uid."""
    users = UserService(identity=IdentityService())
    profile = users.create_account_with_profile(email, password, display_name, UserRole.admin)
    return profile["uid"]


def main():
    if len(sys.argv) < 3:
        print("Usage: python scripts/seed_admin.py <email> <password> [display name]")
        return 1

    print("\n[1] Checking MongoDB connection...")
    if not test_mongo_connection():
        print("    ✗ MongoDB not reachable. Check MONGODB_URI.")
        return 1
    init_mongo_indexes()
    print("    ✓ Connected, indexes ready")

    print("\n[2] Creating administrator...")
    display_name = sys.argv[3] if len(sys.argv) > 3 else "Administrator"
    try:
        uid = seed_admin(sys.argv[1], sys.argv[2], display_name)
    except PortalError as e:
        print(f"    ✗ {e.detail}")
        return 1
    print(f"    ✓ Admin created (uid: {uid})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
