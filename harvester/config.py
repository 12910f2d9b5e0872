"""
Environment-backed configuration
"""

import os
from typing import Optional, Tuple

from dotenv import find_dotenv, load_dotenv

from harvester.models import AuthConfig, HarvestConfig, DEFAULT_QUERY, DEFAULT_URL_PATTERN


def load_config(
    credentials_path: Optional[str] = None,
    token_path: Optional[str] = None,
    output_path: Optional[str] = None,
    query: Optional[str] = None
) -> Tuple[AuthConfig, HarvestConfig]:
    """Build configs from arguments, then environment variables, then defaults"""
    load_dotenv(find_dotenv(usecwd=True))

    auth_config = AuthConfig(
        credentials_path=credentials_path or os.getenv('GMAIL_CREDENTIALS_PATH', 'credentials.json'),
        token_path=token_path or os.getenv('GMAIL_TOKEN_PATH', 'token.json')
    )

    harvest_config = HarvestConfig(
        query=query or os.getenv('HARVEST_QUERY', DEFAULT_QUERY),
        url_pattern=os.getenv('HARVEST_URL_PATTERN', DEFAULT_URL_PATTERN),
        output_path=output_path or os.getenv('HARVEST_OUTPUT_PATH', 'urls.js')
    )

    return auth_config, harvest_config
