import datetime
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from google.cloud.firestore import AsyncClient
from pydantic import BaseModel

import config
import sendgridemail
from dependencies import get_firestore_client
from domain.contact import ContactMessage, validate_contact

logger = logging.getLogger('uvicorn.error')

router = APIRouter(
    prefix="/contact",
    tags=["contact"]
)


class ContactResult(BaseModel):
    success: bool
    message: str


@router.post("/", response_model=ContactResult)
async def send_message(
    contact: ContactMessage,
    background_tasks: BackgroundTasks,
    db: AsyncClient = Depends(get_firestore_client)
):
    errors = validate_contact(contact)
    if errors:
        logger.warning(f"Rejected contact message: {errors}")
        raise HTTPException(status_code=422, detail=errors)

    try:
        _, doc_ref = await db.collection(config.settings.messages_collection).add({
            "name": contact.name,
            "email": contact.email,
            "message": contact.message,
            "createdAt": datetime.datetime.now(datetime.timezone.utc),
        })
        logger.info(f"Contact message written with ID: {doc_ref.id}")
    except Exception as e:
        logger.exception(f"Error sending message from {contact.email}: {e}")
        raise HTTPException(status_code=500, detail="Failed to send message. Please try again.")

    background_tasks.add_task(sendgridemail.send_contact_notification, contact)
    return ContactResult(
        success=True,
        message="Thanks for reaching out! I'll respond to your message shortly.",
    )
