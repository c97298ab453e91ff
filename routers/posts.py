import datetime
import logging
import math
import re
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from google.cloud.firestore import AsyncClient
from pydantic import BaseModel, Field

import config
from dependencies import get_firestore_client, websocket_firestore_client
from domain.comments import (
    MAX_LEN,
    MIN_LEN,
    PAGE_SIZE,
    CommentIn,
    CommentValidationError,
    avatar_color,
    avatar_initial,
    validate_entry,
)
from services.firestore_store import fetch_collection, format_date, parse_date
from services.post_view import PostView
from services.search import live_search, matches_query

logger = logging.getLogger('uvicorn.error')

DEFAULT_READ_TIME = "5 min read"
CARD_FIELDS = ["title", "blogTitle", "image", "content", "date", "readTime", "createdAt", "comments"]

router = APIRouter(
    prefix="/posts",
    tags=["posts", "comments"]
)


# --- Pydantic Models ---
class PostCard(BaseModel):
    id: str
    title: str
    excerpt: str = ""
    image: Optional[str] = None
    date: str
    readTime: str
    commentCount: int = 0


class Post(BaseModel):
    id: str
    title: str
    content: List[str] = Field(default_factory=list)
    image: Optional[str] = None
    date: str
    readTime: str


class CommentOut(BaseModel):
    author: str
    body: str
    initial: str
    avatarColor: str


class CommentPageOut(BaseModel):
    page: int
    totalPages: int
    pageSize: int = PAGE_SIZE
    total: int
    hasPrevious: bool
    hasNext: bool
    comments: List[CommentOut]


# --- Helper Functions ---
def format_read_time(read_time: Optional[str]) -> str:
    """
    Normalises the free-form readTime field. "m:ss" and "h:mm:ss" durations
    are rounded up to whole minutes, a bare number is taken as minutes.
    """
    if not read_time:
        return DEFAULT_READ_TIME
    value = read_time.strip().lower()
    time_match = re.match(r'^(\d+):(\d{1,2})(?::(\d{1,2}))?$', value)
    if time_match:
        first, second = int(time_match.group(1)), int(time_match.group(2))
        if time_match.group(3):
            total_seconds = first * 3600 + second * 60 + int(time_match.group(3))
        else:
            total_seconds = first * 60 + second
        return f"{max(1, math.ceil(total_seconds / 60))} min read"
    number_match = re.search(r'\d+', value)
    if number_match:
        return f"{max(1, int(number_match.group(0)))} min read"
    return DEFAULT_READ_TIME


def sort_key(post: Dict[str, Any]) -> datetime.datetime:
    """createdAt wins over date; undated posts sort last."""
    return (
        parse_date(post.get("createdAt"))
        or parse_date(post.get("date"))
        or datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)
    )


def display_date(value: Any) -> str:
    parsed = parse_date(value)
    if parsed is None:
        return "Date unavailable"
    return format_date(parsed)


def post_title(data: Dict[str, Any]) -> str:
    return data.get("title") or data.get("blogTitle") or "Untitled"


def post_excerpt(data: Dict[str, Any]) -> str:
    content = data.get("content")
    if isinstance(content, list) and content and isinstance(content[0], str):
        return content[0]
    return ""


def to_card(data: Dict[str, Any]) -> PostCard:
    comments = data.get("comments")
    return PostCard(
        id=data["id"],
        title=post_title(data),
        excerpt=post_excerpt(data),
        image=data.get("image"),
        date=display_date(data.get("createdAt") or data.get("date")),
        readTime=format_read_time(data.get("readTime")),
        commentCount=len(comments) if isinstance(comments, list) else 0,
    )


def filter_posts(posts: List[Dict[str, Any]], query: Optional[str]) -> List[PostCard]:
    return [
        to_card(post) for post in posts
        if matches_query([post_title(post), post_excerpt(post), post.get("readTime")], query)
    ]


def comment_page_out(view: PostView) -> CommentPageOut:
    board = view.board
    page = board.view()
    return CommentPageOut(
        page=page.page,
        totalPages=page.total_pages,
        total=len(board.comments),
        hasPrevious=page.has_previous,
        hasNext=page.has_next,
        comments=[
            CommentOut(
                author=c.author,
                body=c.body,
                initial=avatar_initial(c.author),
                avatarColor=avatar_color(c.author),
            )
            for c in page.comments
        ],
    )


async def load_posts(db: AsyncClient) -> List[Dict[str, Any]]:
    posts = await fetch_collection(db, config.settings.blog_collection, CARD_FIELDS)
    return sorted(posts, key=sort_key, reverse=True)


async def mount_post_view(db: AsyncClient, post_id: str, report=None) -> PostView:
    view = PostView(db, post_id, report=report)
    await view.mount()
    if not view.loaded:
        raise HTTPException(status_code=500, detail="Internal server error while fetching post")
    if view.post is None:
        raise HTTPException(status_code=404, detail=f"Post with id {post_id} not found")
    return view


# --- Post API Routes ---
@router.get("/", response_model=List[PostCard])
async def get_all_posts(
    q: Optional[str] = Query(default=None, description="Search in title, excerpt and read time"),
    db: AsyncClient = Depends(get_firestore_client)
):
    try:
        posts = await load_posts(db)
    except Exception as e:
        logger.exception(f"Error retrieving blog posts: {e}")
        raise HTTPException(status_code=500, detail="Internal server error while fetching posts")
    return filter_posts(posts, q)


@router.websocket("/search")
async def search_posts(websocket: WebSocket):
    await websocket.accept()
    db = await websocket_firestore_client(websocket)
    if db is None:
        return
    try:
        posts = await load_posts(db)
    except Exception as e:
        logger.exception(f"Error retrieving blog posts for search: {e}")
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR, reason="Internal server error while fetching posts")
        return
    try:
        await live_search(
            websocket,
            posts,
            lambda posts, query: [card.model_dump() for card in filter_posts(posts, query)],
        )
    except WebSocketDisconnect:
        logger.info("Post search client disconnected")


@router.get("/{post_id}", response_model=Post)
async def get_post_by_id(
    post_id: str,
    db: AsyncClient = Depends(get_firestore_client)
):
    view = await mount_post_view(db, post_id)
    data = view.post
    content = data.get("content")
    return Post(
        id=post_id,
        title=post_title(data),
        content=[p for p in content if isinstance(p, str)] if isinstance(content, list) else [],
        image=data.get("image"),
        date=display_date(data.get("createdAt") or data.get("date")),
        readTime=format_read_time(data.get("readTime")),
    )


# --- Comment API Routes ---
@router.get("/{post_id}/comments/", response_model=CommentPageOut)
async def get_comments_for_post(
    post_id: str,
    page: int = Query(default=1, description="1-indexed page; out-of-range values are clamped"),
    db: AsyncClient = Depends(get_firestore_client)
):
    view = await mount_post_view(db, post_id)
    view.board.set_page(page)
    return comment_page_out(view)


@router.post("/{post_id}/comments/", response_model=CommentPageOut, status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: str,
    comment_in: CommentIn,
    db: AsyncClient = Depends(get_firestore_client)
):
    try:
        validate_entry(comment_in.author, comment_in.body)
    except CommentValidationError as e:
        logger.warning(f"Rejected comment on post '{post_id}': {e}")
        raise HTTPException(
            status_code=422,
            detail=f"{e} Comments need a name and {MIN_LEN}-{MAX_LEN} characters of text.",
        )

    errors = []
    view = await mount_post_view(db, post_id, report=errors.append)
    if not await view.board.submit(comment_in.author, comment_in.body):
        logger.error(f"Error creating comment for post '{post_id}': {errors[0] if errors else 'rejected'}")
        raise HTTPException(status_code=500, detail="Internal server error while creating comment.")
    return comment_page_out(view)
