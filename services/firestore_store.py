import datetime
import logging
from typing import Any, Dict, List, Optional, Sequence

from google.cloud.firestore import ArrayUnion, AsyncClient

import config
from domain.comments import Comment

logger = logging.getLogger('uvicorn.error')

COMMENTS_FIELD = "comments"


class PersistenceError(Exception):
    """Raised when a write to the document store did not happen."""


def format_date(value: Any) -> Any:
    """Formats Firestore timestamps as 'Mon D, YYYY'; other values pass through."""
    if isinstance(value, datetime.datetime):
        return f"{value.strftime('%b')} {value.day}, {value.year}"
    return value


def parse_date(value: Any) -> Optional[datetime.datetime]:
    """
    Reads a stored date: a timestamp, an ISO string, or an already formatted
    "Mon D, YYYY" string. Naive values are taken as UTC.
    """
    if isinstance(value, datetime.datetime):
        return value if value.tzinfo else value.replace(tzinfo=datetime.timezone.utc)
    if isinstance(value, str) and value:
        try:
            parsed = datetime.datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            try:
                parsed = datetime.datetime.strptime(value, "%b %d, %Y")
            except ValueError:
                return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=datetime.timezone.utc)
    return None


def _format_timestamps(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: format_date(value) for key, value in data.items()}


async def fetch_document(db: AsyncClient, collection_name: str, doc_id: str) -> Optional[Dict[str, Any]]:
    doc = await db.collection(collection_name).document(doc_id).get()
    if not doc.exists:
        logger.warning(f"No document '{doc_id}' in collection '{collection_name}'")
        return None
    return _format_timestamps(doc.to_dict() or {})


async def fetch_collection(
    db: AsyncClient,
    collection_name: str,
    fields: Optional[Sequence[str]] = None,
) -> List[Dict[str, Any]]:
    """
    Streams every document of a collection. With ``fields`` only those keys are
    kept. The document id is always included under ``id``; raw values are
    returned so callers can sort on timestamps themselves.
    """
    results = []
    async for doc in db.collection(collection_name).stream():
        data = doc.to_dict() or {}
        if fields:
            data = {key: data[key] for key in fields if key in data}
        data["id"] = doc.id
        results.append(data)
    return results


async def append_comment(db: AsyncClient, parent_id: str, entry: Dict[str, str]) -> bool:
    comment = Comment.model_construct(author=entry["author"], body=entry["body"])
    post_ref = db.collection(config.settings.blog_collection).document(parent_id)
    post_doc = await post_ref.get()
    if not post_doc.exists:
        raise PersistenceError(f"Post with id {parent_id} not found.")
    try:
        await post_ref.update({COMMENTS_FIELD: ArrayUnion([comment.to_document()])})
    except Exception as e:
        raise PersistenceError(f"Could not append comment to '{parent_id}': {e}") from e
    logger.info(f"Appended comment by '{comment.author}' to post '{parent_id}'")
    return True


def firestore_appender(db: AsyncClient):
    """Binds ``append_comment`` to a client for use by CommentBoard."""
    async def _append(parent_id: str, entry: Dict[str, str]) -> bool:
        return await append_comment(db, parent_id, entry)
    return _append
