"""
Shared data models for the URL harvester
"""

from dataclasses import dataclass, field
from typing import List, Optional


# If modifying these scopes, delete the file token.json.
SCOPES = ['https://www.googleapis.com/auth/gmail.modify']

DEFAULT_QUERY = 'label:udemy-notifications is:unread'
DEFAULT_URL_PATTERN = r'https://e2\.udemymail\.com/ls/click.+?(?=")'


@dataclass(frozen=True)
class ClientSecrets:
    """OAuth client registration loaded from credentials.json"""
    client_id: str
    client_secret: str
    redirect_uri: str

    def to_client_config(self) -> dict:
        """Rebuild the 'installed' client config expected by the OAuth flow"""
        return {
            'installed': {
                'client_id': self.client_id,
                'client_secret': self.client_secret,
                'redirect_uris': [self.redirect_uri],
                'auth_uri': 'https://accounts.google.com/o/oauth2/auth',
                'token_uri': 'https://oauth2.googleapis.com/token',
            }
        }


@dataclass(frozen=True)
class MessageRef:
    """Message identifiers returned by a list query"""
    id: str
    thread_id: str


@dataclass(frozen=True)
class ExtractedUrl:
    """Tracking URL pulled out of a single message"""
    url: str
    thread_id: str


@dataclass
class AuthConfig:
    """Configuration for the authorization step"""
    credentials_path: str = 'credentials.json'
    token_path: str = 'token.json'
    scopes: List[str] = field(default_factory=lambda: list(SCOPES))


@dataclass
class HarvestConfig:
    """Configuration for a harvest run"""
    query: str = DEFAULT_QUERY
    url_pattern: str = DEFAULT_URL_PATTERN
    output_path: str = 'urls.js'
    user_id: str = 'me'
    unread_label: str = 'UNREAD'


@dataclass
class HarvestResult:
    """Outcome of a completed harvest run"""
    urls: List[str]
    messages_processed: int
    pages_processed: int
    output_path: Optional[str] = None
