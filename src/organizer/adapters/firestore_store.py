"""Firestore document store adapter."""

import logging

from organizer.config import Config
from organizer.ports.document_store import Filter

logger = logging.getLogger(__name__)


class FirestoreDocumentStore:
    """
    Cloud Firestore storage via firebase_admin.

    Implements DocumentStore protocol. The Firebase app is initialized on
    first use, from a service account file when one is configured and from
    application default credentials otherwise.
    """

    def __init__(self, config: Config, client=None):
        self.config = config
        self._client = client

    def _get_client(self):
        if self._client is not None:
            return self._client

        import firebase_admin
        from firebase_admin import credentials, firestore

        if not firebase_admin._apps:
            options = {}
            if self.config.firebase_project_id:
                options["projectId"] = self.config.firebase_project_id
            if self.config.firebase_credentials_file:
                cred = credentials.Certificate(self.config.firebase_credentials_file)
            else:
                cred = credentials.ApplicationDefault()
            firebase_admin.initialize_app(cred, options or None)
            logger.info("Initialized Firebase app")

        self._client = firestore.client()
        return self._client

    def _doc(self, collection: str, doc_id: str):
        return self._get_client().collection(collection).document(doc_id)

    def add(self, collection: str, data: dict) -> str:
        ref = self._get_client().collection(collection).document(data.get("id") or None)
        ref.set({**data, "id": ref.id})
        return ref.id

    def get(self, collection: str, doc_id: str) -> dict | None:
        snapshot = self._doc(collection, doc_id).get()
        if not snapshot.exists:
            return None
        return {**snapshot.to_dict(), "id": snapshot.id}

    def set(self, collection: str, doc_id: str, data: dict) -> None:
        self._doc(collection, doc_id).set({**data, "id": doc_id})

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        from google.api_core.exceptions import NotFound

        try:
            self._doc(collection, doc_id).update(data)
        except NotFound as e:
            raise KeyError(f"{collection}/{doc_id}") from e

    def delete(self, collection: str, doc_id: str) -> None:
        self._doc(collection, doc_id).delete()

    def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict]:
        from firebase_admin import firestore
        from google.cloud.firestore_v1.base_query import FieldFilter

        query = self._get_client().collection(collection)
        for field, value in filters or []:
            query = query.where(filter=FieldFilter(field, "==", value))
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        return [{**snap.to_dict(), "id": snap.id} for snap in query.stream()]
