"""
Firebase Admin SDK initialization and Firestore document store
Provides the collection-level primitives the pipeline is built on
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import firebase_admin
from firebase_admin import auth, firestore
from google.cloud.firestore_v1.base_query import FieldFilter

logger = logging.getLogger(__name__)

# (field, operator, value), e.g. ("status", "==", "new")
Filter = Tuple[str, str, Any]
# (field, "asc" | "desc")
OrderBy = Tuple[str, str]


class FirebaseService:
    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(FirebaseService, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._initialize_firebase()
            FirebaseService._initialized = True

    def _initialize_firebase(self):
        """Initialize Firebase Admin SDK"""
        try:
            if not firebase_admin._apps:
                # Application Default Credentials on Cloud Run / Functions
                logger.info("Initializing Firebase Admin SDK...")
                firebase_admin.initialize_app()
                logger.info("Firebase Admin SDK initialized successfully")
            else:
                logger.info("Firebase Admin SDK already initialized")

            self.db = firestore.client()
            logger.info("Firestore client initialized")

        except Exception as e:
            logger.error(f"Failed to initialize Firebase: {str(e)}")
            raise

    def verify_id_token(self, id_token: str) -> dict:
        """
        Verify Firebase ID token and return decoded token

        Raises:
            ValueError: If token is invalid
        """
        try:
            return auth.verify_id_token(id_token)
        except Exception as e:
            logger.error(f"Token verification failed: {str(e)}")
            raise ValueError(f"Invalid authentication token: {str(e)}")

    def create(self, collection: str, data: Dict[str, Any]) -> str:
        """Add a document with a generated id and return the id."""
        _, doc_ref = self.db.collection(collection).add(data)
        return doc_ref.id

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = self.db.collection(collection).document(doc_id).get()
        if doc.exists:
            return doc.to_dict()
        return None

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        self.db.collection(collection).document(doc_id).set(data, merge=merge)

    def update(self, collection: str, doc_id: str, patch: Dict[str, Any]) -> None:
        self.db.collection(collection).document(doc_id).update(patch)

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> List[Tuple[str, Dict[str, Any]]]:
        """
        Run a query and return (doc_id, data) pairs.

        Raises:
            google.api_core.exceptions.FailedPrecondition: when Firestore needs
                a composite index for the filter/order combination
        """
        query = self.db.collection(collection)
        for field, op, value in filters:
            query = query.where(filter=FieldFilter(field, op, value))
        if order_by:
            field, direction = order_by
            query = query.order_by(
                field,
                direction=firestore.Query.DESCENDING if direction == "desc" else firestore.Query.ASCENDING,
            )
        if limit:
            query = query.limit(limit)
        return [(doc.id, doc.to_dict()) for doc in query.stream()]

    def update_in_transaction(
        self,
        collection: str,
        doc_id: str,
        build_patch: Callable[[Optional[Dict[str, Any]]], Optional[Dict[str, Any]]],
    ) -> Optional[Dict[str, Any]]:
        """
        Read a document and write the patch computed from it atomically.

        build_patch receives the current data (None if missing) and returns the
        fields to update, or None to leave the document untouched. Returns the
        patch that was written.
        """
        doc_ref = self.db.collection(collection).document(doc_id)

        @firestore.transactional
        def _apply(transaction):
            snapshot = doc_ref.get(transaction=transaction)
            patch = build_patch(snapshot.to_dict() if snapshot.exists else None)
            if patch:
                transaction.update(doc_ref, patch)
            return patch

        return _apply(self.db.transaction())


def get_firebase_service() -> FirebaseService:
    """Lazily create the shared Firestore service."""
    return FirebaseService()
