"""Fixture constants shared by tests and the dev seed script.

Single source of truth: scripts/seed_dev.py imports from here.
"""

from uuid import UUID

FIXTURE_TEAM_ID = UUID("0b7f5e3c-1a52-4e59-9d2b-7a64c1f0a001")
FIXTURE_TEAM_NAME = "Loom Dev Team"

FIXTURE_ADMIN_ID = UUID("0b7f5e3c-1a52-4e59-9d2b-7a64c1f0a101")
FIXTURE_ADMIN_NAME = "Ada Admin"
FIXTURE_ADMIN_EMAIL = "ada@loom.test"

FIXTURE_VIEWER_ID = UUID("0b7f5e3c-1a52-4e59-9d2b-7a64c1f0a102")
FIXTURE_VIEWER_NAME = "José Viewer"
FIXTURE_VIEWER_EMAIL = "jose@loom.test"

FIXTURE_GROUP_ID = UUID("0b7f5e3c-1a52-4e59-9d2b-7a64c1f0a201")
FIXTURE_GROUP_NAME = "Editors"

FIXTURE_COLLECTION_ID = UUID("0b7f5e3c-1a52-4e59-9d2b-7a64c1f0a301")
FIXTURE_COLLECTION_NAME = "Handbook"

FIXTURE_DOCUMENT_ID = UUID("0b7f5e3c-1a52-4e59-9d2b-7a64c1f0a401")
FIXTURE_DOCUMENT_TITLE = "Onboarding Guide"
FIXTURE_DOCUMENT_URL_ID = "onboarding-guide"
