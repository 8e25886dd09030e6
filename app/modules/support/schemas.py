from enum import Enum
from pydantic import EmailStr, Field
from app.core.schemas import APIModel

class SupportCategory(str, Enum):
    PRODUCTS_FAMILIES = "Products & Families"
    ATTRIBUTES_GROUPS = "Attributes & Groups"
    ASSETS_UPLOADING = "Assets & Uploading"
    IMPORT_EXPORT = "Import / Export"
    PERMISSIONS_ROLES = "Permissions & Roles"
    BILLING_ACCOUNT = "Billing & Account"
    OTHER = "Other"

class SupportPriority(str, Enum):
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"
    URGENT = "Urgent"

ALLOWED_ATTACHMENT_TYPES = frozenset({
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "application/pdf",
    "text/csv",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
})

class SupportTicketCreate(APIModel):
    subject: str = Field(..., min_length=1, max_length=255)
    category: SupportCategory
    priority: SupportPriority
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    description: str = Field(..., min_length=1)
    workspace: str | None = None
    url: str | None = None
    steps: str | None = None
    expected: str | None = None
    actual: str | None = None
    # honeypot: hidden in the form, only bots fill it in
    website: str | None = None

class SupportTicketResult(APIModel):
    success: bool
    message: str
