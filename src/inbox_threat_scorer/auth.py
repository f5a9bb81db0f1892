"""Read-only Gmail authentication for inbox extraction."""

import logging

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError

from inbox_threat_scorer.constants import CONFIG_DIR, CREDENTIALS_PATH, SCOPES, TOKEN_PATH

logger = logging.getLogger(__name__)


def _load_token() -> Credentials | None:
    if not TOKEN_PATH.exists():
        return None
    return Credentials.from_authorized_user_file(str(TOKEN_PATH), SCOPES)


def get_gmail_service() -> Resource:
    """Return a Gmail API service limited to the read-only scope.

    A cached token at TOKEN_PATH is reused and refreshed when expired.
    Without one, the OAuth browser flow runs against the client secrets
    stored at CREDENTIALS_PATH.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    creds = _load_token()

    if creds and creds.expired and creds.refresh_token:
        logger.debug("Refreshing expired Gmail token")
        creds.refresh(Request())
    elif not creds or not creds.valid:
        if not CREDENTIALS_PATH.exists():
            raise FileNotFoundError(
                f"Credentials file not found at {CREDENTIALS_PATH}.\n"
                "Create an OAuth desktop client in the Google Cloud Console "
                "with the Gmail API enabled and save its JSON as:\n"
                f"  {CREDENTIALS_PATH}"
            )
        flow = InstalledAppFlow.from_client_secrets_file(str(CREDENTIALS_PATH), SCOPES)
        creds = flow.run_local_server(port=0)

    TOKEN_PATH.write_text(creds.to_json())

    return build("gmail", "v1", credentials=creds)


def check_auth() -> str | None:
    """Return the authenticated address, or None when Gmail cannot be reached."""
    try:
        service = get_gmail_service()
        profile = service.users().getProfile(userId="me").execute()
    except (FileNotFoundError, GoogleAuthError, HttpError) as exc:
        logger.warning("Gmail authentication failed: %s", exc)
        return None
    return profile["emailAddress"]
