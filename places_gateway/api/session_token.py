"""
Session Token Signing

Signs the JSON Web Token returned by /auth/session. The token carries the
caller's source IP and user agent plus the validated request payload, so the
external authorizer can bind later requests to the same client.

Environment Variables:
    JWT_ALGORITHM: Signing algorithm (default: RS256)
    JWT_EXPIRES_IN: Lifetime as seconds or <n>s/m/h/d (default: 1h)
    JWT_PRIVATE_KEY_PATH: PEM private key path (default: certs/private.pem)
"""

import logging
import os
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from dotenv import load_dotenv
from jose import jwt

# Load environment variables from .env
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "RS256"
DEFAULT_EXPIRES_IN = "1h"
DEFAULT_PRIVATE_KEY_PATH = Path(__file__).resolve().parent.parent.parent / "certs" / "private.pem"

_DURATION = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


@dataclass
class TokenSettings:
    """Signing settings for session tokens."""

    algorithm: str = DEFAULT_ALGORITHM
    expires_in: int = 3600
    private_key_path: Path = DEFAULT_PRIVATE_KEY_PATH
    key: Optional[Union[str, bytes]] = None  # Inline key; takes precedence over the path

    @classmethod
    def from_env(cls) -> "TokenSettings":
        return cls(
            algorithm=os.getenv("JWT_ALGORITHM", DEFAULT_ALGORITHM),
            expires_in=parse_expires_in(os.getenv("JWT_EXPIRES_IN", DEFAULT_EXPIRES_IN)),
            private_key_path=Path(os.getenv("JWT_PRIVATE_KEY_PATH", str(DEFAULT_PRIVATE_KEY_PATH))),
        )

    def signing_key(self) -> Union[str, bytes]:
        """
        Return the signing key.

        Raises:
            FileNotFoundError: If no inline key is set and the key file is missing
        """
        if self.key is not None:
            return self.key
        return self.private_key_path.read_bytes()


def parse_expires_in(value: Union[str, int]) -> int:
    """
    Parse a token lifetime into seconds.

    Examples:
        >>> parse_expires_in(900)
        900
        >>> parse_expires_in("7d")
        604800

    Raises:
        ValueError: If the value is not a non-negative duration
    """
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0:
            raise ValueError(f"Invalid token lifetime: {value}")
        return value

    match = _DURATION.match(str(value))
    if match is None:
        raise ValueError(f"Invalid token lifetime: {value!r}")

    amount, unit = match.groups()
    return int(amount) * _UNIT_SECONDS[unit]


def sign_token(
    payload: dict[str, Any],
    source_ip: Optional[str],
    user_agent: Optional[str],
    settings: Optional[TokenSettings] = None,
) -> str:
    """
    Sign a session token.

    Claims are {"ip": source_ip, "ua": user_agent} updated with the payload,
    plus "iat" and "exp". The payload has already been checked for reserved
    claims, so it cannot overwrite ip/ua/iat/exp.

    Args:
        payload: Validated /auth/session body
        source_ip: Caller IP from the request context
        user_agent: Caller user agent from the request context
        settings: Signing settings (read from the environment if omitted)

    Returns:
        Encoded JWT
    """
    settings = settings or TokenSettings.from_env()

    issued_at = int(time.time())
    claims: dict[str, Any] = {"ip": source_ip, "ua": user_agent}
    claims.update(payload)
    claims["iat"] = issued_at
    claims["exp"] = issued_at + settings.expires_in

    token = jwt.encode(claims, settings.signing_key(), algorithm=settings.algorithm)

    logger.info(
        "Signed session token",
        extra={
            "algorithm": settings.algorithm,
            "expires_in": settings.expires_in,
            "client_type": payload.get("type"),
        },
    )

    return token
