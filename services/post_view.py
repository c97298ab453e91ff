import logging
from typing import Any, Dict, Optional

from google.cloud.firestore import AsyncClient

import config
from domain.comments import comments_from_documents
from services.comment_board import CommentBoard, Reporter
from services.firestore_store import fetch_document, firestore_appender
from services.loader import ContentLoader

logger = logging.getLogger('uvicorn.error')


class PostView:
    """
    A blog post together with its comment board. Mounting loads the post
    document once; each load replaces the board's comments and resets it to
    the first page.
    """

    def __init__(self, db: AsyncClient, post_id: str, report: Optional[Reporter] = None):
        self.db = db
        self.post_id = post_id
        self.post: Optional[Dict[str, Any]] = None
        self.loaded = False
        self.board = CommentBoard(post_id, [], append_comment=firestore_appender(db), report=report)
        self._loader: Optional[ContentLoader] = None

    async def _fetch(self) -> Optional[Dict[str, Any]]:
        return await fetch_document(self.db, config.settings.blog_collection, self.post_id)

    def _apply(self, post: Optional[Dict[str, Any]]) -> None:
        self.post = post
        self.loaded = True
        if post is None:
            self.board.reset([])
            return
        self.board.reset(comments_from_documents(post.get("comments"), self.post_id))

    async def mount(self) -> Optional[Dict[str, Any]]:
        self._loader = ContentLoader(self._fetch, self._apply, name=f"post '{self.post_id}'")
        await self._loader.start()
        return self.post

    def unmount(self) -> None:
        if self._loader is not None:
            self._loader.dispose()
