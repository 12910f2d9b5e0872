"""
Authorizer - Produces an authenticated Gmail service handle
"""

import logging
from typing import Callable, Optional

from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build

from harvester.credential_store import TokenStore, load_client_secrets
from harvester.errors import HarvesterError, TokenExchangeError
from harvester.models import AuthConfig, ClientSecrets


logger = logging.getLogger(__name__)


def build_gmail_service(creds):
    """Build the Gmail v1 API client for the given credentials"""
    return build('gmail', 'v1', credentials=creds)


class Authorizer:
    """Loads stored credentials or runs the interactive consent flow"""

    def __init__(
        self,
        config: AuthConfig,
        code_prompt: Callable[[str], str],
        token_store: Optional[TokenStore] = None,
        service_factory: Callable = build_gmail_service,
        show_message: Callable[[str], None] = print
    ):
        self.config = config
        self.code_prompt = code_prompt
        self.token_store = token_store or TokenStore(config.token_path)
        self.service_factory = service_factory
        self.show_message = show_message

    # === Main Entry Point ===

    def authorize(self):
        """Return an authenticated service, or None after logging the failure"""
        try:
            secrets = load_client_secrets(self.config.credentials_path)

            if self.token_store.exists():
                creds = self.token_store.load(self.config.scopes)
                logger.info("Using stored credentials")
            else:
                logger.info("No stored token found - starting authorization flow")
                creds = self.get_new_token(secrets)

            return self.service_factory(creds)

        except HarvesterError as error:
            logger.error(f"Authorization failed: {error}")
            return None

    # === Interactive Flow ===

    def get_new_token(self, secrets: ClientSecrets):
        """Prompt for a one-time code, exchange it and store the token"""
        flow = Flow.from_client_config(
            secrets.to_client_config(),
            scopes=self.config.scopes,
            redirect_uri=secrets.redirect_uri
        )

        auth_url, _ = flow.authorization_url(
            access_type='offline',
            prompt='consent'
        )
        self.show_message(f"Authorize this app by visiting this url: {auth_url}")

        try:
            code = self.code_prompt("Enter the code from that page here: ").strip()
        except EOFError as error:
            raise TokenExchangeError("No authorization code entered (input closed)") from error

        try:
            flow.fetch_token(code=code)
        except Exception as error:
            raise TokenExchangeError(f"Error retrieving access token: {error}") from error

        creds = flow.credentials
        try:
            self.token_store.save(creds)
        except OSError as error:
            # The token is still usable for this run
            logger.error(f"Could not store token: {error}")

        return creds
