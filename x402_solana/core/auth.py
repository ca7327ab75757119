# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Bearer token authentication for the facilitator."""

import asyncio
import base64
import logging
import time
import uuid
from typing import Callable, Optional, Protocol, Tuple

import jwt
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import load_der_private_key

from ..types import FacilitatorTransportError

logger = logging.getLogger(__name__)


API_KEY_SECRET_PREFIX = "payai_sk_"
TOKEN_LIFETIME_SECONDS = 120
REFRESH_MARGIN_SECONDS = 30


class TokenProvider(Protocol):
    async def get_token(self) -> str:
        ...


def load_api_key_secret(secret: str) -> Ed25519PrivateKey:
    """Load an Ed25519 key from a base64 PKCS#8 secret.

    The secret may carry the ``payai_sk_`` prefix.

    Raises:
        ValueError: If the secret is not a base64 Ed25519 PKCS#8 key
    """
    if secret.startswith(API_KEY_SECRET_PREFIX):
        secret = secret[len(API_KEY_SECRET_PREFIX):]
    der = base64.b64decode(secret + "=" * (-len(secret) % 4))
    key = load_der_private_key(der, password=None)
    if not isinstance(key, Ed25519PrivateKey):
        raise ValueError("API key secret must be an Ed25519 private key")
    return key


class JwtTokenProvider:
    """Issues short-lived EdDSA JWTs signed with the API key secret.

    The current token is reused until shortly before it expires. Refresh is
    single-flight: concurrent callers that find the token stale wait on one
    lock and the first of them mints the replacement.
    """

    def __init__(
        self,
        api_key_id: str,
        api_key_secret: str,
        lifetime_seconds: int = TOKEN_LIFETIME_SECONDS,
        refresh_margin_seconds: int = REFRESH_MARGIN_SECONDS,
        clock: Callable[[], float] = time.time
    ):
        self.api_key_id = api_key_id
        self._api_key_secret = api_key_secret
        self._lifetime = lifetime_seconds
        self._margin = refresh_margin_seconds
        self._clock = clock
        self._token: Optional[str] = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    def _is_fresh(self) -> bool:
        return self._token is not None and self._clock() < self._expires_at - self._margin

    def _mint(self) -> Tuple[str, float]:
        key = load_api_key_secret(self._api_key_secret)
        now = int(self._clock())
        claims = {
            "sub": self.api_key_id,
            "iat": now,
            "exp": now + self._lifetime,
            "jti": str(uuid.uuid4()),
        }
        token = jwt.encode(claims, key, algorithm="EdDSA", headers={"kid": self.api_key_id})
        return token, now + self._lifetime

    async def get_token(self) -> str:
        if self._is_fresh():
            return self._token
        async with self._lock:
            if not self._is_fresh():
                logger.debug(f"Refreshing facilitator token for key {self.api_key_id}")
                try:
                    self._token, self._expires_at = await asyncio.to_thread(self._mint)
                except (ValueError, TypeError, jwt.PyJWTError) as e:
                    raise FacilitatorTransportError(
                        f"Could not obtain facilitator token: {e}"
                    ) from e
            return self._token
