"""
Credential Store - Loads client secrets and persists OAuth tokens
"""

import json
import logging
from pathlib import Path
from typing import List

from google.oauth2.credentials import Credentials

from harvester.errors import CredentialsError
from harvester.models import ClientSecrets


logger = logging.getLogger(__name__)


def load_client_secrets(path: str) -> ClientSecrets:
    """Read the 'installed' client registration from credentials.json"""
    secrets_path = Path(path)

    try:
        content = json.loads(secrets_path.read_text())
    except OSError as error:
        raise CredentialsError(f"Error loading client secret file {path}: {error}") from error
    except json.JSONDecodeError as error:
        raise CredentialsError(f"Client secret file {path} is not valid JSON: {error}") from error

    try:
        installed = content['installed']
        return ClientSecrets(
            client_id=installed['client_id'],
            client_secret=installed['client_secret'],
            redirect_uri=installed['redirect_uris'][0]
        )
    except (KeyError, IndexError, TypeError) as error:
        raise CredentialsError(f"Client secret file {path} is missing field {error}") from error


class TokenStore:
    """File-backed store for the user's access and refresh tokens"""

    def __init__(self, path: str = 'token.json'):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self, scopes: List[str]) -> Credentials:
        """Load stored credentials, raising CredentialsError if unreadable"""
        try:
            info = json.loads(self.path.read_text())
            if not isinstance(info, dict):
                raise CredentialsError(f"Token file {self.path} does not hold a JSON object")

            if info.get('refresh_token'):
                creds = Credentials.from_authorized_user_info(info, scopes)
            elif info.get('token'):
                # Google omits refresh_token when consent was granted earlier
                creds = Credentials(
                    token=info['token'],
                    token_uri=info.get('token_uri'),
                    client_id=info.get('client_id'),
                    client_secret=info.get('client_secret'),
                    scopes=scopes
                )
            else:
                raise CredentialsError(f"Token file {self.path} holds neither an access nor a refresh token")
        except OSError as error:
            raise CredentialsError(f"Error reading token file {self.path}: {error}") from error
        except ValueError as error:
            # JSONDecodeError and missing token fields both land here
            raise CredentialsError(f"Token file {self.path} is invalid: {error}") from error

        logger.debug(f"Loaded stored token from {self.path}")
        return creds

    def save(self, creds) -> None:
        """Persist credentials for later runs"""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(creds.to_json())
        logger.info(f"Token stored to {self.path}")
