import logging

from firebase_admin import get_app, initialize_app

from wphub.core.settings import get_settings

logger = logging.getLogger(__name__)


def init_firebase() -> None:
    """Initialize Firebase Admin SDK (idempotent).

    Credentials come from GOOGLE_APPLICATION_CREDENTIALS; FIREBASE_PROJECT_ID
    pins the project when the credentials do not carry one.
    """
    try:
        get_app()
        return
    except ValueError:
        pass

    settings = get_settings()
    options = None
    if settings.firebase_project_id:
        options = {"projectId": settings.firebase_project_id}
    initialize_app(options=options)
    logger.info("Firebase Admin SDK initialized")
