"""In-memory stand-in for the Firestore AsyncClient used by the routers."""

import copy
from typing import Any, Dict, Optional

import pytest
from fastapi.testclient import TestClient
from google.cloud.firestore import ArrayUnion

from main import app


class FakeSnapshot:
    def __init__(self, doc_id: str, data: Optional[Dict[str, Any]]):
        self.id = doc_id
        self._data = copy.deepcopy(data)

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._data)


class FakeDocument:
    def __init__(self, store: "FakeFirestore", collection: str, doc_id: str):
        self.store = store
        self.collection = collection
        self.id = doc_id

    async def get(self) -> FakeSnapshot:
        return FakeSnapshot(self.id, self.store.data.get(self.collection, {}).get(self.id))

    async def set(self, data: Dict[str, Any]) -> None:
        self.store.data.setdefault(self.collection, {})[self.id] = copy.deepcopy(data)

    async def update(self, data: Dict[str, Any]) -> None:
        if self.store.fail_writes:
            raise RuntimeError("write failed")
        doc = self.store.data.get(self.collection, {}).get(self.id)
        if doc is None:
            raise KeyError(self.id)
        for key, value in data.items():
            if isinstance(value, ArrayUnion):
                current = doc.setdefault(key, [])
                for item in value.values:
                    if item not in current:
                        current.append(copy.deepcopy(item))
            else:
                doc[key] = copy.deepcopy(value)


class FakeCollection:
    def __init__(self, store: "FakeFirestore", name: str):
        self.store = store
        self.name = name

    def document(self, doc_id: str) -> FakeDocument:
        return FakeDocument(self.store, self.name, doc_id)

    async def stream(self):
        if self.store.fail_reads:
            raise RuntimeError("read failed")
        for doc_id, data in list(self.store.data.get(self.name, {}).items()):
            yield FakeSnapshot(doc_id, data)

    async def add(self, data: Dict[str, Any]):
        if self.store.fail_writes:
            raise RuntimeError("write failed")
        docs = self.store.data.setdefault(self.name, {})
        doc_id = f"{self.name}-{len(docs) + 1}"
        docs[doc_id] = copy.deepcopy(data)
        return None, FakeDocument(self.store, self.name, doc_id)


class FakeFirestore:
    def __init__(self, data: Optional[Dict[str, Dict[str, Any]]] = None):
        self.data = copy.deepcopy(data or {})
        self.fail_reads = False
        self.fail_writes = False

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)

    async def close(self) -> None:
        pass


def comment_docs(count: int):
    return [{"name": f"user{i}", "cmt": f"comment number {i}"} for i in range(count)]


@pytest.fixture
def fake_db() -> FakeFirestore:
    return FakeFirestore({
        "blog-data": {
            "hello-world": {
                "title": "Hello World",
                "content": ["First paragraph about Python.", "Second paragraph."],
                "date": "2024-03-05",
                "image": "/img/hello.png",
                "readTime": "4:30",
                "comments": comment_docs(7),
            },
            "older-post": {
                "blogTitle": "Older Post",
                "content": ["Notes on architecture."],
                "date": "2023-01-10",
                "image": "/img/old.png",
            },
        },
        "projects": {
            "cli": {
                "title": "Rust CLI",
                "description": "A command line tool. " * 12,
                "image": "/img/cli.png",
                "codeLink": "https://example.com/cli",
                "date": "2024-02-01",
            },
            "site": {
                "title": "Portfolio Site",
                "description": "This very site.",
                "image": "/img/site.png",
                "codeLink": "https://example.com/site",
                "demoLink": "https://example.com",
                "date": "2024-05-01",
            },
        },
        "about-me": {
            "jon": {
                "name": "jon doe smith",
                "title": "Engineer",
                "bio": "Builds things.",
                "location": "Earth",
                "expertise": ["Python", "TypeScript"],
            },
        },
    })


@pytest.fixture
def client(fake_db: FakeFirestore):
    app.state.db = fake_db
    yield TestClient(app)
    app.state.db = None
