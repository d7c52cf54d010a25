"""
Endpoint and credential configuration
"""

import os
from dataclasses import dataclass

from .errors import AuthError

LOGIN_URL = "https://identitysso.betfair.com/api/login"
API_URL = "https://api.betfair.com/exchange/betting/json-rpc/v1"


@dataclass(frozen=True)
class Endpoints:
    """Login and betting API URLs (defaults: global exchange)"""

    login_url: str = LOGIN_URL
    api_url: str = API_URL


@dataclass(frozen=True)
class Credentials:
    """Username, password and application key"""

    username: str
    password: str
    app_key: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***', app_key='***')"


def credentials_from_env() -> Credentials:
    """
    Read credentials from BETFAIR_USERNAME, BETFAIR_PASSWORD and BETFAIR_APP_KEY.

    Raises:
        AuthError: One or more of the variables is unset or empty
    """
    names = ("BETFAIR_USERNAME", "BETFAIR_PASSWORD", "BETFAIR_APP_KEY")
    values = {name: os.getenv(name, "") for name in names}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise AuthError(f"Missing {', '.join(missing)}. Set it in your environment.")
    return Credentials(
        username=values["BETFAIR_USERNAME"],
        password=values["BETFAIR_PASSWORD"],
        app_key=values["BETFAIR_APP_KEY"],
    )
