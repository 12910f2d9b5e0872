"""
Exceptions raised by the URL harvester
"""


class HarvesterError(Exception):
    """Base class for harvester failures"""


class CredentialsError(HarvesterError):
    """Client secrets or stored token could not be read"""


class TokenExchangeError(HarvesterError):
    """The authorization code could not be exchanged for a token"""


class UrlNotFoundError(HarvesterError):
    """A message body did not contain a tracking URL"""

    def __init__(self, message_id: str):
        super().__init__(f"No tracking URL found in message {message_id}")
        self.message_id = message_id
