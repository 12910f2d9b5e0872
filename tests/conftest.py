"""
Shared test fixtures for URL harvester tests
"""

import json

import pytest
from typing import List

from harvester.models import AuthConfig, HarvestConfig
from tests.mocks import MockGmailService, make_message, tracking_url


# === Fixtures ===

@pytest.fixture
def harvest_config(tmp_path) -> HarvestConfig:
    """HarvestConfig writing to a temporary output file"""
    return HarvestConfig(output_path=str(tmp_path / 'urls.js'))


@pytest.fixture
def sample_messages() -> List[dict]:
    """Five notifications across four threads; msg_004 repeats thread_b"""
    return [
        make_message('msg_001', 'thread_a', tracking_url('aaa')),
        make_message('msg_002', 'thread_b', tracking_url('bbb')),
        make_message('msg_003', 'thread_c', tracking_url('ccc')),
        make_message('msg_004', 'thread_b', tracking_url('bbb-second')),
        make_message('msg_005', 'thread_d', tracking_url('ddd')),
    ]


@pytest.fixture
def mock_gmail_service(sample_messages) -> MockGmailService:
    """Mailbox paged three messages at a time, so five messages span two pages"""
    return MockGmailService(sample_messages, page_size=3)


@pytest.fixture
def mock_gmail_service_empty() -> MockGmailService:
    return MockGmailService([])


@pytest.fixture
def client_secrets_file(tmp_path):
    """credentials.json in the shape Google's console downloads it"""
    path = tmp_path / 'credentials.json'
    path.write_text(json.dumps({
        'installed': {
            'client_id': 'client-123.apps.googleusercontent.com',
            'client_secret': 'shh',
            'redirect_uris': ['urn:ietf:wg:oauth:2.0:oob', 'http://localhost']
        }
    }))
    return path


@pytest.fixture
def token_file(tmp_path):
    """Stored token as written by Credentials.to_json()"""
    path = tmp_path / 'token.json'
    path.write_text(json.dumps({
        'token': 'access-abc',
        'refresh_token': 'refresh-xyz',
        'token_uri': 'https://oauth2.googleapis.com/token',
        'client_id': 'client-123.apps.googleusercontent.com',
        'client_secret': 'shh',
        'scopes': ['https://www.googleapis.com/auth/gmail.modify']
    }))
    return path


@pytest.fixture
def auth_config(client_secrets_file, tmp_path) -> AuthConfig:
    return AuthConfig(
        credentials_path=str(client_secrets_file),
        token_path=str(tmp_path / 'token.json')
    )
