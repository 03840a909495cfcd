# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the business logic behind the API:
# - models/: SQLAlchemy tables and pydantic schemas
# - services/: Event and authentication operations
#
# Services take an open database session and return ORM objects; routes
# turn those into response models.
# =============================================================================
