"""
Shared fixtures: an in-memory stand-in for the Motor collections the
services touch, and helpers to build users.
"""

import copy
import uuid
from datetime import datetime
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import pytest
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from config import Settings
from models.user import User, UserRole, InvoiceSettings


def _matches(doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for key, expected in query.items():
        actual = doc.get(key)
        if isinstance(expected, dict) and "$in" in expected:
            if actual not in expected["$in"]:
                return False
        elif actual != expected:
            return False
    return True


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    def sort(self, key, direction=1):
        self._docs.sort(
            key=lambda d: (d.get(key) is None, d.get(key)),
            reverse=direction == -1,
        )
        return self

    async def to_list(self, length=None):
        return self._docs[:length] if length else list(self._docs)

    def __aiter__(self):
        self._iter = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    """
    Async collection double supporting the subset of operations used here.

    `fail_when(operation, filter)` may be set to make writes raise, to
    simulate a store rejecting one side of a dual write.
    """

    def __init__(self, name: str):
        self.name = name
        self.docs: List[Dict[str, Any]] = []
        self.fail_when: Optional[Callable[[str, Dict[str, Any]], bool]] = None

    def _check_failure(self, operation: str, query: Dict[str, Any]):
        if self.fail_when and self.fail_when(operation, query):
            raise RuntimeError(f"simulated {operation} failure on {self.name}")

    def _find(self, query):
        return [d for d in self.docs if _matches(d, query or {})]

    def find(self, query=None, projection=None):
        return FakeCursor([copy.deepcopy(d) for d in self._find(query)])

    async def find_one(self, query=None):
        found = self._find(query)
        return copy.deepcopy(found[0]) if found else None

    async def count_documents(self, query):
        return len(self._find(query))

    async def insert_one(self, doc):
        self._check_failure("insert", doc)
        doc.setdefault("_id", uuid.uuid4().hex)
        if any(d["_id"] == doc["_id"] for d in self.docs):
            raise DuplicateKeyError(f"duplicate _id {doc['_id']}")
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def replace_one(self, query, doc, upsert=False):
        self._check_failure("replace", query)
        found = self._find(query)
        if found:
            index = self.docs.index(found[0])
            self.docs[index] = copy.deepcopy(doc)
            return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)
        if upsert:
            new_doc = copy.deepcopy(doc)
            new_doc.setdefault("_id", uuid.uuid4().hex)
            self.docs.append(new_doc)
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=new_doc["_id"])
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

    def _apply_update(self, doc, update, inserting):
        for key, value in update.get("$set", {}).items():
            doc[key] = copy.deepcopy(value)
        if inserting:
            for key, value in update.get("$setOnInsert", {}).items():
                doc[key] = copy.deepcopy(value)
        for key, value in update.get("$inc", {}).items():
            doc[key] = doc.get(key, 0) + value
        for key, value in update.get("$max", {}).items():
            if key not in doc or doc[key] < value:
                doc[key] = value

    async def update_one(self, query, update, upsert=False):
        self._check_failure("update", query)
        found = self._find(query)
        if found:
            self._apply_update(found[0], update, inserting=False)
            return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)
        if upsert:
            new_doc = {k: v for k, v in query.items() if not isinstance(v, dict)}
            self._apply_update(new_doc, update, inserting=True)
            new_doc.setdefault("_id", uuid.uuid4().hex)
            self.docs.append(new_doc)
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=new_doc["_id"])
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

    async def find_one_and_update(self, query, update, upsert=False, return_document=ReturnDocument.BEFORE):
        self._check_failure("update", query)
        found = self._find(query)
        if not found:
            return None
        before = copy.deepcopy(found[0])
        self._apply_update(found[0], update, inserting=False)
        return copy.deepcopy(found[0]) if return_document == ReturnDocument.AFTER else before

    async def delete_one(self, query):
        self._check_failure("delete", query)
        found = self._find(query)
        if found:
            self.docs.remove(found[0])
            return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def create_index(self, *args, **kwargs):
        return "index"


class FakeDatabase:
    def __init__(self):
        self._collections: Dict[str, FakeCollection] = {}

    def __getattr__(self, name: str) -> FakeCollection:
        if name.startswith("_"):
            raise AttributeError(name)
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]


def make_user(role: UserRole, name: str = "Test User", **extra) -> User:
    user_id = extra.pop("id", uuid.uuid4().hex)
    return User(
        id=user_id,
        email=extra.pop("email", f"{user_id[:8]}@tradeledger.io"),
        name=name,
        role=role,
        created_at=datetime(2024, 1, 1),
        invoice_settings=extra.pop("invoice_settings", InvoiceSettings()),
        **extra,
    )


def user_doc(user: User, **extra) -> Dict[str, Any]:
    """Stored form of a User, as the users collection holds it"""
    doc = user.dict()
    doc["_id"] = doc.pop("id")
    doc["role"] = user.role.value
    doc["status"] = user.status.value
    doc["hashed_password"] = extra.pop("hashed_password", "")
    doc.update(extra)
    return doc


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def settings():
    return Settings(default_country="AE", default_invoice_prefix="INV-", product_markup=1.3)


@pytest.fixture
def vendor():
    return make_user(UserRole.VENDOR, name="Fresh Farms", company_name="Fresh Farms LLC", country="AE")


@pytest.fixture
def client_user():
    return make_user(
        UserRole.CLIENT,
        name="Corner Cafe",
        phone="+971500000000",
        address="Street 1, Dubai",
        trn="100200300400500",
    )
