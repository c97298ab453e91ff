import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from google.cloud.firestore import AsyncClient
from pydantic import BaseModel, Field

import config
from dependencies import get_firestore_client
from services.firestore_store import fetch_document

logger = logging.getLogger('uvicorn.error')

DEFAULT_INITIALS = "JD"
LIST_FIELDS = ("expertise", "passions", "hobbies", "more", "techJourney")

router = APIRouter(
    prefix="/about",
    tags=["about"]
)


class AboutMe(BaseModel):
    name: str = ""
    initials: str = DEFAULT_INITIALS
    title: str = ""
    avatarUrl: Optional[str] = None
    bio: str = ""
    location: str = ""
    expertise: List[str] = Field(default_factory=list)
    passions: List[str] = Field(default_factory=list)
    hobbies: List[str] = Field(default_factory=list)
    more: List[str] = Field(default_factory=list)
    techJourney: List[str] = Field(default_factory=list)


def name_initials(name: Optional[str]) -> str:
    parts = [part for part in (name or "").split(" ") if part]
    if not parts:
        return DEFAULT_INITIALS
    return "".join(part[0].upper() for part in parts[:2])


def to_about(data: Dict[str, Any]) -> AboutMe:
    """Coerces the loosely shaped profile document into AboutMe."""
    profile = {}
    for key in ("name", "title", "bio", "location"):
        if isinstance(data.get(key), str):
            profile[key] = data[key]
    if isinstance(data.get("avatarUrl"), str):
        profile["avatarUrl"] = data["avatarUrl"]
    for key in LIST_FIELDS:
        value = data.get(key)
        if isinstance(value, list):
            profile[key] = [item for item in value if isinstance(item, str)]
    profile["initials"] = name_initials(profile.get("name"))
    return AboutMe(**profile)


@router.get("/", response_model=AboutMe)
async def get_about(db: AsyncClient = Depends(get_firestore_client)):
    try:
        data = await fetch_document(db, config.settings.about_collection, config.settings.about_doc_id)
        if data is None:
            raise HTTPException(status_code=404, detail="Profile not found")
        return to_about(data)
    except HTTPException as http_exc:
        raise http_exc
    except Exception as e:
        logger.exception(f"Error fetching about me data: {e}")
        raise HTTPException(status_code=500, detail="Internal server error while fetching profile")
