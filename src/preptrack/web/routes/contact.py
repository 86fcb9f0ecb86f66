"""Public contact form."""

from fastapi import APIRouter, status

from preptrack.core import contact
from preptrack.web.schemas import ContactCreate, ContactResponse

router = APIRouter(prefix="/api/contact", tags=["contact"])


@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
def submit(body: ContactCreate) -> dict:
    """Send a message to the admins (no sign-in required)."""
    return contact.submit(body.name, body.email, body.message).to_dict()
