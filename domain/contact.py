import re
from typing import Dict

from pydantic import BaseModel

EMAIL_PATTERN = re.compile(r'^[\w-]+(\.[\w-]+)*@([\w-]+\.)+[a-zA-Z]{2,7}$')


class ContactMessage(BaseModel):
    name: str = ""
    email: str = ""
    message: str = ""


def validate_contact(message: ContactMessage) -> Dict[str, str]:
    """Returns field -> error text; empty when the message can be sent."""
    errors = {}
    if not message.name.strip():
        errors["name"] = "Name is required."
    if not message.email.strip():
        errors["email"] = "Email is required."
    elif not EMAIL_PATTERN.match(message.email):
        errors["email"] = "Please enter a valid email address."
    if not message.message.strip():
        errors["message"] = "Message is required."
    return errors
