import datetime
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from google.cloud.firestore import AsyncClient
from pydantic import BaseModel, Field

import config
from dependencies import get_firestore_client, websocket_firestore_client
from services.firestore_store import fetch_collection, parse_date
from services.search import live_search, matches_query

logger = logging.getLogger('uvicorn.error')

PREVIEW_LENGTH = 165

router = APIRouter(
    prefix="/projects",
    tags=["projects"]
)


class Project(BaseModel):
    id: str
    title: str
    description: str = ""
    preview: str = ""
    isTruncated: bool = False
    image: Optional[str] = None
    demoLink: Optional[str] = Field(default=None)
    codeLink: Optional[str] = None
    date: str


def preview_text(description: str) -> str:
    if len(description) <= PREVIEW_LENGTH:
        return description
    return f"{description[:PREVIEW_LENGTH].rstrip()}..."


def to_project(data: Dict[str, Any]) -> Project:
    description = data.get("description") or ""
    date = data.get("date")
    if isinstance(date, datetime.datetime):
        date = date.date().isoformat()
    return Project(
        id=data["id"],
        title=data.get("title") or "",
        description=description,
        preview=preview_text(description),
        isTruncated=len(description) > PREVIEW_LENGTH,
        image=data.get("image"),
        demoLink=data.get("demoLink") or None,
        codeLink=data.get("codeLink"),
        date=date or datetime.date.today().isoformat(),
    )


def sort_key(project: Project) -> datetime.datetime:
    """Dates may be ISO or "Mon D, YYYY"; unparsable ones sort last."""
    return parse_date(project.date) or datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)


async def load_projects(db: AsyncClient) -> List[Project]:
    projects = []
    for data in await fetch_collection(db, config.settings.projects_collection):
        try:
            projects.append(to_project(data))
        except Exception as validation_error:
            logger.error(f"Data validation error for project doc {data.get('id')}: {validation_error}. Data: {data}")
            continue
    return sorted(projects, key=sort_key, reverse=True)


def filter_projects(projects: List[Project], query: Optional[str]) -> List[Project]:
    return [p for p in projects if matches_query([p.title, p.description], query)]


@router.get("/", response_model=List[Project])
async def get_all_projects(
    q: Optional[str] = Query(default=None, description="Search in title and description"),
    db: AsyncClient = Depends(get_firestore_client)
):
    try:
        projects = await load_projects(db)
    except Exception as e:
        logger.exception(f"Error retrieving projects: {e}")
        raise HTTPException(status_code=500, detail="Internal server error while fetching projects")
    return filter_projects(projects, q)


@router.websocket("/search")
async def search_projects(websocket: WebSocket):
    await websocket.accept()
    db = await websocket_firestore_client(websocket)
    if db is None:
        return
    try:
        projects = await load_projects(db)
    except Exception as e:
        logger.exception(f"Error retrieving projects for search: {e}")
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR, reason="Internal server error while fetching projects")
        return
    try:
        await live_search(
            websocket,
            projects,
            lambda projects, query: [p.model_dump() for p in filter_projects(projects, query)],
        )
    except WebSocketDisconnect:
        logger.info("Project search client disconnected")
