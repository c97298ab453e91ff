import logging
import math
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence

from domain.comments import (
    PAGE_SIZE,
    Comment,
    CommentValidationError,
    validate_entry,
)

logger = logging.getLogger('uvicorn.error')

AppendComment = Callable[[str, dict], Awaitable[bool]]
Reporter = Callable[[BaseException], None]


def log_report(error: BaseException) -> None:
    logger.error(f"Error posting comment: {error}")


@dataclass
class Draft:
    author: str = ""
    body: str = ""


@dataclass
class CommentPage:
    page: int
    total_pages: int
    comments: List[Comment] = field(default_factory=list)
    start_index: int = 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def total_pages_for(count: int, page_size: int = PAGE_SIZE) -> int:
    return max(1, math.ceil(count / page_size))


def clamp_page(page: int, total_pages: int) -> int:
    return max(1, min(page, total_pages))


class CommentBoard:
    """
    Comment thread for a single parent content item.

    Comments are kept oldest first, as stored, and shown newest first in pages
    of PAGE_SIZE. New entries go through ``append_comment(parent_id, entry)``
    and are only reflected locally once that call succeeds.
    """

    def __init__(
        self,
        parent_id: str,
        initial_comments: Optional[Sequence[Comment]] = None,
        append_comment: Optional[AppendComment] = None,
        report: Optional[Reporter] = None,
    ):
        self.parent_id = parent_id
        self.comments: List[Comment] = list(initial_comments or [])
        self.page = 1
        self.draft = Draft()
        self.submitting = False
        self._append_comment = append_comment
        self._report = report or log_report

    def reset(self, initial_comments: Optional[Sequence[Comment]]) -> None:
        """Replaces the thread after the parent item reloads."""
        self.comments = list(initial_comments or [])
        self.page = 1

    @property
    def total_pages(self) -> int:
        return total_pages_for(len(self.comments))

    @property
    def current_page(self) -> int:
        return clamp_page(self.page, self.total_pages)

    def set_page(self, page: int) -> None:
        self.page = page

    def next_page(self) -> None:
        self.page = min(self.total_pages, self.current_page + 1)

    def previous_page(self) -> None:
        self.page = max(1, self.current_page - 1)

    def view(self) -> CommentPage:
        ordered = list(reversed(self.comments))
        page = self.current_page
        start = (page - 1) * PAGE_SIZE
        return CommentPage(
            page=page,
            total_pages=self.total_pages,
            comments=ordered[start:start + PAGE_SIZE],
            start_index=start,
        )

    def update_draft(self, author: Optional[str] = None, body: Optional[str] = None) -> None:
        if author is not None:
            self.draft.author = author
        if body is not None:
            self.draft.body = body

    def _entry(self, author: Optional[str], body: Optional[str]) -> Comment:
        return validate_entry(
            self.draft.author if author is None else author,
            self.draft.body if body is None else body,
        )

    def can_submit(self, author: Optional[str] = None, body: Optional[str] = None) -> bool:
        if self.submitting:
            return False
        try:
            self._entry(author, body)
        except CommentValidationError:
            return False
        return True

    async def submit(self, author: Optional[str] = None, body: Optional[str] = None) -> bool:
        """
        Validates and persists one comment. Returns True when the comment was
        appended. Arguments default to the current draft; passing them also
        stores them as the draft so a failed attempt keeps the user's input.
        """
        if self.submitting:
            logger.warning(f"Comment submit on '{self.parent_id}' ignored: another submit is in flight")
            return False
        self.update_draft(author, body)
        try:
            comment = self._entry(None, None)
        except CommentValidationError as e:
            logger.info(f"Comment on '{self.parent_id}' rejected: {e}")
            return False
        if self._append_comment is None:
            self._report(RuntimeError(f"No append operation configured for '{self.parent_id}'"))
            return False

        self.submitting = True
        try:
            appended = await self._append_comment(self.parent_id, comment.model_dump())
            if not appended:
                raise RuntimeError(f"Append to '{self.parent_id}' was not acknowledged")
        except Exception as e:
            self._report(e)
            return False
        finally:
            self.submitting = False

        self.comments.append(comment)
        self.draft = Draft()
        self.page = 1
        logger.info(f"Comment by '{comment.author}' added to '{self.parent_id}'")
        return True
