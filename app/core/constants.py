"""Core constants: table names, filter operators and shared literal values.

Single source of truth for table names used both in queries and as cache
invalidation patterns (DRY).
"""

# Tables in the managed data API
TABLE_PROPERTIES = "properties"
TABLE_PROFILES = "profiles"
TABLE_RENTAL_APPLICATIONS = "rental_applications"
TABLE_VIEWING_REQUESTS = "viewing_requests"
TABLE_PAYMENT_RECORDS = "payment_records"
TABLE_PAYMENT_DISTRIBUTIONS = "payment_distributions"
TABLE_EMAIL_VERIFICATIONS = "email_verifications"
TABLE_RENTAL_AGREEMENTS = "rental_agreements"

# Filter operators understood by the data API (PostgREST syntax)
FILTER_OPERATORS = frozenset(
    {"eq", "neq", "gt", "gte", "lt", "lte", "like", "ilike", "is", "in", "contains"}
)

# Select clauses shared by several queries
SELECT_PROPERTY_WITH_OWNER = "*, owner:profiles!owner_id(full_name)"
SELECT_PROPERTY_SUMMARY = (
    "*, properties:property_id(id, title, location, price, bedrooms, bathrooms, images)"
)
SELECT_WITH_APPLICANT = (
    "*, profiles:user_id(full_name, email, phone), properties:property_id(title)"
)

STATUS_PENDING = "pending"
SELECT_APPLICATION_FOR_PAYMENT = (
    "*, properties:property_id(id, title, location, price, security_deposit, owner_id,"
    " platform_fee_percentage, management_fee_percentage, management_company_id)"
)

# Rent payments
PLATFORM_RECIPIENT_ID = "00000000-0000-0000-0000-000000000000"
MAX_VERIFICATION_ATTEMPTS = 5
LEASE_LENGTH_DAYS = 365
