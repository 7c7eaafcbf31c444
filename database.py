import os
import logging
import threading
from copy import deepcopy
from typing import Any, Dict, Optional, Tuple
from pymongo import MongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError
from dotenv import load_dotenv

# Load environment variables if present
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "appdb")
SCORING_COLLECTION = os.getenv("SCORING_COLLECTION", "academic_settings")

# Fixed key of the one configuration document
SETTINGS_ID = "scoring"

logger = logging.getLogger(__name__)

client = None
_db = None

try:
    client = MongoClient(DATABASE_URL)
    _db = client[DATABASE_NAME]
except Exception as e:
    logger.warning(f"MongoDB client not created for {DATABASE_URL}: {e}")
    client = None
    _db = None

# Expose db for other modules
db = _db


def _strip_id(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    doc = dict(doc)
    doc.pop("_id", None)
    return doc


class SettingsRepository:
    """Storage for the single scoring configuration document."""

    def get_or_create(self, defaults: Dict[str, Any]) -> Tuple[Dict[str, Any], bool]:
        """The stored document, and whether this call inserted it."""
        raise NotImplementedError

    def update(self, fields: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def replace(self, document: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError


class MongoSettingsRepository(SettingsRepository):
    def __init__(self, collection):
        self.collection = collection

    def get_or_create(self, defaults: Dict[str, Any]) -> Tuple[Dict[str, Any], bool]:
        # Insert-if-absent in one round trip; never check-then-create.
        # BEFORE is None only when this call did the insert.
        try:
            before = self.collection.find_one_and_update(
                {"_id": SETTINGS_ID},
                {"$setOnInsert": defaults},
                upsert=True,
                return_document=ReturnDocument.BEFORE,
            )
        except DuplicateKeyError:
            # A concurrent upsert won the insert
            return _strip_id(self.collection.find_one({"_id": SETTINGS_ID})), False
        if before is None:
            return dict(defaults), True
        return _strip_id(before), False

    def update(self, fields: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
        on_insert = {k: v for k, v in defaults.items() if k not in fields}
        ops: Dict[str, Any] = {"$set": fields}
        if on_insert:
            ops["$setOnInsert"] = on_insert
        try:
            doc = self.collection.find_one_and_update(
                {"_id": SETTINGS_ID},
                ops,
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            doc = self.collection.find_one_and_update(
                {"_id": SETTINGS_ID},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        return _strip_id(doc)

    def replace(self, document: Dict[str, Any]) -> Dict[str, Any]:
        doc = self.collection.find_one_and_replace(
            {"_id": SETTINGS_ID},
            document,
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        # Leftovers from before the fixed key was used
        self.collection.delete_many({"_id": {"$ne": SETTINGS_ID}})
        return _strip_id(doc)


class InMemorySettingsRepository(SettingsRepository):
    """Process-local store, used in tests."""

    def __init__(self):
        self._lock = threading.Lock()
        self._doc: Optional[Dict[str, Any]] = None
        self.inserts = 0

    def get_or_create(self, defaults: Dict[str, Any]) -> Tuple[Dict[str, Any], bool]:
        with self._lock:
            created = self._doc is None
            if created:
                self._doc = deepcopy(defaults)
                self.inserts += 1
            return deepcopy(self._doc), created

    def update(self, fields: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            if self._doc is None:
                self._doc = deepcopy(defaults)
                self.inserts += 1
            self._doc.update(deepcopy(fields))
            return deepcopy(self._doc)

    def replace(self, document: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            self._doc = deepcopy(document)
            return deepcopy(self._doc)


def get_settings_repository() -> SettingsRepository:
    if db is None:
        raise RuntimeError("Database not initialized")
    return MongoSettingsRepository(db[SCORING_COLLECTION])
