from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from firebase_admin import db

from .collections import COLLECTION_SCHEMAS, collection_path

logger = logging.getLogger(__name__)

Filter = Tuple[str, str, Any]


class DatabaseService:
    """
    Thin async wrapper around the Firebase Realtime Database.

    Every method returns a tuple whose first element is a success flag and whose
    last element is an error message (None on success); nothing raises.
    Documents are returned as plain dicts with the node key under ``id``.
    """

    def __init__(self, reference_factory: Optional[Callable[[str], Any]] = None):
        # Resolved lazily so importing the module never requires an initialized app
        self._reference_factory = reference_factory or db.reference

    def _ref(self, collection: str, document_id: str = None):
        return self._reference_factory(collection_path(collection, document_id))

    def _document_ref(self, collection: str, document_id: str):
        # An empty id would resolve to the collection node itself
        if not document_id:
            raise ValueError("Document id is required")
        return self._ref(collection, document_id)

    @staticmethod
    def _with_key(key: str, value: Any) -> Dict[str, Any]:
        data = dict(value) if isinstance(value, dict) else {"value": value}
        return {"id": key, **{k: v for k, v in data.items() if k != "id"}}

    def _validate(self, collection: str, data: Dict[str, Any]) -> Optional[str]:
        schema = COLLECTION_SCHEMAS.get(collection)
        if not schema:
            return None
        missing = [field for field in schema['required'] if data.get(field) in (None, "")]
        if missing:
            return f"Missing required fields for {collection}: {', '.join(missing)}"
        return None

    async def create_document(
        self,
        collection: str,
        data: Dict[str, Any],
        document_id: Optional[str] = None,
        validate: bool = True,
    ) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Write a full document. With ``document_id`` the node is overwritten in place;
        without it the database generates a push key which is stored as ``id``.
        """
        try:
            if document_id:
                ref = self._ref(collection, document_id)
            else:
                ref = self._ref(collection).push()
                document_id = ref.key

            document = {**data, "id": document_id}
            if validate:
                error = self._validate(collection, document)
                if error:
                    return False, None, error

            ref.set(document)
            logger.debug(f"Wrote {collection}/{document_id}")
            return True, document_id, None
        except Exception as e:
            logger.error(f"Error creating document in {collection}: {e}")
            return False, None, str(e)

    async def get_document(self, collection: str, document_id: str) -> Tuple[bool, Optional[Dict[str, Any]], Optional[str]]:
        """Returns (True, None, None) when the node does not exist."""
        try:
            value = self._document_ref(collection, document_id).get()
            if value is None:
                return True, None, None
            return True, self._with_key(document_id, value), None
        except Exception as e:
            logger.error(f"Error getting document {collection}/{document_id}: {e}")
            return False, None, str(e)

    async def get_all_documents(self, collection: str) -> Tuple[bool, List[Dict[str, Any]], Optional[str]]:
        try:
            value = self._ref(collection).get() or {}
            return True, [self._with_key(key, child) for key, child in value.items()], None
        except Exception as e:
            logger.error(f"Error listing {collection}: {e}")
            return False, [], str(e)

    async def query_documents(
        self,
        collection: str,
        filters: Optional[List[Filter]] = None,
    ) -> Tuple[bool, List[Dict[str, Any]], Optional[str]]:
        """
        Equality query. The first ``==`` filter runs server side through the child
        index (order_by_child / equal_to); the rest are applied to the result.
        """
        try:
            filters = list(filters or [])
            indexed = next((f for f in filters if f[1] == "=="), None)

            if indexed:
                field, _, value = indexed
                raw = self._ref(collection).order_by_child(field).equal_to(value).get() or {}
                filters.remove(indexed)
            else:
                raw = self._ref(collection).get() or {}

            documents = [self._with_key(key, child) for key, child in raw.items()]

            for field, op, value in filters:
                if op == "==":
                    documents = [d for d in documents if d.get(field) == value]
                elif op == "!=":
                    documents = [d for d in documents if d.get(field) != value]
                elif op == "in":
                    documents = [d for d in documents if d.get(field) in value]
                else:
                    return False, [], f"Unsupported filter operator: {op}"

            return True, documents, None
        except Exception as e:
            logger.error(f"Error querying {collection} with {filters}: {e}")
            return False, [], str(e)

    async def update_document(
        self,
        collection: str,
        document_id: str,
        data: Dict[str, Any],
        validate: bool = True,
    ) -> Tuple[bool, Optional[str]]:
        """Merge ``data`` into an existing node (multi-path update)."""
        try:
            if validate and "id" in data and data["id"] != document_id:
                return False, "Document id cannot be changed"
            self._document_ref(collection, document_id).update(data)
            return True, None
        except Exception as e:
            logger.error(f"Error updating document {collection}/{document_id}: {e}")
            return False, str(e)

    async def delete_document(self, collection: str, document_id: str) -> Tuple[bool, Optional[str]]:
        try:
            self._document_ref(collection, document_id).delete()
            return True, None
        except Exception as e:
            logger.error(f"Error deleting document {collection}/{document_id}: {e}")
            return False, str(e)

    async def increment_counter(self, counter_id: str, seed: int = 0) -> Tuple[bool, Optional[int], Optional[str]]:
        """
        Atomically increment ``counters/<counter_id>`` and return the new value.
        A missing counter starts from ``seed``.
        """
        try:
            def _increment(current):
                return (current if isinstance(current, int) else seed) + 1

            value = self._ref('counters', counter_id).transaction(_increment)
            return True, value, None
        except Exception as e:
            logger.error(f"Error incrementing counter {counter_id}: {e}")
            return False, None, str(e)

    async def get_counter(self, counter_id: str) -> Tuple[bool, Optional[int], Optional[str]]:
        try:
            return True, self._ref('counters', counter_id).get(), None
        except Exception as e:
            logger.error(f"Error reading counter {counter_id}: {e}")
            return False, None, str(e)


database_service = DatabaseService()
