# services/firebase.py
import os, json
import logging
import firebase_admin
from firebase_admin import credentials, firestore

from config import Config

logger = logging.getLogger(__name__)


def _resolve_cred():
    json_blob = os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON")
    if json_blob:
        return credentials.Certificate(json.loads(json_blob))

    try:
        cred_path = Config._resolve_firebase_cred_path()
    except FileNotFoundError:
        # On Cloud Run, default credentials (attached service account) will work
        logger.info("[firebase] No credential file found, using application default credentials")
        return None
    return credentials.Certificate(cred_path) if cred_path else None


def get_db():
    """Return a new Firestore client, initializing the default Firebase app once.

    Call this once at startup and hand the client to RecordStore.
    """
    if not firebase_admin._apps:
        cred = _resolve_cred()
        if cred is not None:
            firebase_admin.initialize_app(cred)
        else:
            firebase_admin.initialize_app()
        logger.info("[firebase] Firebase initialized successfully")
    return firestore.client()
