import logging
from typing import Any, List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger('uvicorn.error')

PAGE_SIZE = 5
MIN_LEN = 3
MAX_LEN = 300

ANONYMOUS = "Anonymous"
AVATAR_PALETTE = [
    "bg-red-600",
    "bg-orange-600",
    "bg-amber-600",
    "bg-lime-600",
    "bg-emerald-600",
    "bg-cyan-600",
    "bg-blue-600",
    "bg-indigo-600",
    "bg-fuchsia-600",
    "bg-pink-600",
]


class CommentValidationError(ValueError):
    """Raised when a comment entry fails the author/body checks."""


class Comment(BaseModel):
    author: str
    body: str = Field(min_length=MIN_LEN, max_length=MAX_LEN)

    class Config:
        from_attributes = True

    @classmethod
    def from_document(cls, data: Any) -> Optional["Comment"]:
        """
        Maps one stored entry ({"name", "cmt"}) onto a Comment.
        Returns None for entries that do not have the expected shape.
        """
        if not isinstance(data, dict):
            return None
        name = data.get("name")
        text = data.get("cmt")
        if not isinstance(name, str) or not isinstance(text, str):
            return None
        # Stored entries predate the length bounds, so only coerce the shape here.
        return cls.model_construct(author=name.strip(), body=text.strip())

    def to_document(self) -> dict:
        return {"name": self.author, "cmt": self.body}


class CommentIn(BaseModel):
    author: str
    body: str


def comments_from_documents(entries: Any, parent_id: str = "") -> List[Comment]:
    if not isinstance(entries, list):
        if entries is not None:
            logger.warning(f"Comments field for '{parent_id}' is not a list: {entries!r}")
        return []
    comments = []
    for entry in entries:
        comment = Comment.from_document(entry)
        if comment is None:
            logger.warning(f"Dropping malformed comment entry on '{parent_id}': {entry!r}")
            continue
        comments.append(comment)
    return comments


def validate_entry(author: str, body: str) -> Comment:
    author = (author or "").strip()
    body = (body or "").strip()
    if not author:
        raise CommentValidationError("Name is required.")
    hint = validation_hint(body)
    if hint:
        raise CommentValidationError(hint)
    return Comment(author=author, body=body)


def is_valid_entry(author: str, body: str) -> bool:
    try:
        validate_entry(author, body)
    except CommentValidationError:
        return False
    return True


def validation_hint(body: str) -> Optional[str]:
    """Inline guidance shown under the comment box, or None when the body is fine."""
    length = len((body or "").strip())
    if length == 0:
        return "Comment cannot be empty."
    if length < MIN_LEN:
        return f"Comment must be at least {MIN_LEN} characters."
    if length > MAX_LEN:
        return f"Comment must be at most {MAX_LEN} characters."
    return None


def avatar_initial(author: str) -> str:
    name = (author or "").strip()
    return name[0].upper() if name else ANONYMOUS[0]


def avatar_color(author: str) -> str:
    key = (author or "").strip() or ANONYMOUS
    return AVATAR_PALETTE[sum(ord(ch) for ch in key) % len(AVATAR_PALETTE)]
