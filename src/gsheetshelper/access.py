from collections.abc import Iterable
import json
import logging

import google.auth
import google.auth.exceptions
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build, Resource
import googleapiclient.discovery_cache as gws_discovery_cache

from .config import SheetsHelperConfig

logger = logging.getLogger(__name__)


class GoogleAccess():
    """
    Authenticated access to the Sheets API.
    See https://developers.google.com/workspace/guides/create-credentials#choose_the_access_credential_that_is_right_for_you
    for an overview of what you'll need.  Once you've obtained a secrets file point the config at it.
    For OAuth it will trigger the confirmation screen once, after that the refresh token
    is kept in the credential cache so confirmation does not need to happen repeatedly.
    With no secrets file the application default credentials are used
    (GOOGLE_APPLICATION_CREDENTIALS, gcloud, metadata server).

    This is an instance rather than a module singleton so a process can talk
    to Google as more than one identity.
    """

    _SCOPES = {
        "sheets": "https://www.googleapis.com/auth/spreadsheets",
        "sheets-ro": "https://www.googleapis.com/auth/spreadsheets.readonly",
        "drive-file": "https://www.googleapis.com/auth/drive.file",
        "drive": "https://www.googleapis.com/auth/drive",
    }
    _SCOPE_URL_PREFIX = "https://www.googleapis.com/"

    def __init__(self, config: SheetsHelperConfig | None = None) -> None:
        self.config = config if config is not None else SheetsHelperConfig()
        self._creds = None
        self._service = None
        self._discovery_cache = gws_discovery_cache.autodetect()

    def __bool__(self) -> bool:
        return self.connected

    def __str__(self) -> str:
        return f"{'Connected' if self.connected else 'Disconnected'}:{self.scopes}"

    @classmethod
    def get_scope(cls, scope: str) -> str:
        """
        Get a scope based on simplified label.
        A raw URL will also be accepted.
        """
        s = str(scope)
        sc = cls._SCOPES.get(s, "")
        if not sc and s.startswith(cls._SCOPE_URL_PREFIX):
            sc = s
        return sc

    @property
    def scopes(self) -> list[str]:
        """Requested scopes translated to URLs, unknown labels are dropped"""
        values = self.config.scopes
        if isinstance(values, str) or not isinstance(values, Iterable):
            values = [values]
        return [s for s in (self.get_scope(v) for v in values) if s]

    @property
    def connected(self) -> bool:
        return bool(self._creds) and bool(self._creds.valid)

    @property
    def creds(self):
        return self._creds

    def _load_cached(self, requested: list[str]) -> None:
        cache = self.config.cred_cache
        if not (cache.exists() and cache.is_file()):
            return
        with open(cache, 'r', encoding='utf-8') as f:
            scopes = json.load(f).get('scopes', [])
        if all(s in scopes for s in requested):
            self._creds = Credentials.from_authorized_user_file(str(cache), requested)
        else:
            logger.info("credential cache %s lacks requested scopes, discarding", cache)
            cache.unlink()

    def _save_cached(self, requested: list[str]) -> None:
        # only user credentials carry a refresh token worth keeping
        refresh_token = getattr(self._creds, 'refresh_token', None)
        if not refresh_token:
            return
        user_info = {'refresh_token': refresh_token, 'client_id': self._creds.client_id,
                     'client_secret': self._creds.client_secret, 'scopes': requested}
        with open(self.config.cred_cache, 'w', encoding='utf-8') as f:
            json.dump(user_info, f, ensure_ascii=False, indent=2)

    def connect(self) -> bool:
        """
        Establish a new authentication session, trying in order the credential
        cache, the installed app OAuth flow and finally the application defaults.
        """
        self._creds = None
        self._service = None
        requested = self.scopes
        if not requested:
            return False
        self._load_cached(requested)
        if not self.connected and self._creds and self._creds.refresh_token:
            try:
                self._creds.refresh(Request())
            except google.auth.exceptions.RefreshError as e:
                logger.warning("failed to refresh stored creds: %s, re-authorizing", e)
                self._creds = None
                self.config.cred_cache.unlink(missing_ok=True)

        if not self.connected:
            secrets = self.config.client_secrets
            if secrets.exists() and secrets.is_file():
                flow = InstalledAppFlow.from_client_secrets_file(str(secrets), requested)
                self._creds = flow.run_local_server(host=self.config.auth_server,
                                                    port=self.config.auth_port)
            else:
                try:
                    self._creds, _ = google.auth.default(scopes=requested)
                    if not self._creds.valid:
                        self._creds.refresh(Request())
                except google.auth.exceptions.DefaultCredentialsError:
                    logger.error("no client secrets at %s and no default credentials", secrets)
                    self._creds = None

        if self.connected:
            self._save_cached(requested)
        return self.connected

    def get_service(self) -> Resource:
        """
        Build the sheets v4 resource if not already available, connecting if required.
        """
        if self._service is None:
            if not self.connected and not self.connect():
                raise google.auth.exceptions.DefaultCredentialsError(
                    "Unable to obtain Google credentials for the Sheets API")
            self._service = build("sheets", "v4", credentials=self._creds,
                                  cache=self._discovery_cache)
        return self._service
