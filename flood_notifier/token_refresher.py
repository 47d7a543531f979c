"""Refresh-token grant against the Microsoft identity platform."""

from __future__ import annotations

import logging

import requests

from .config import Settings
from .errors import AuthError
from .models import Credential, Secrets

logger = logging.getLogger(__name__)


class TokenRefresher:
    """Exchange the stored refresh token for a new credential bundle."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()

    def refresh(self, secrets: Secrets, credential: Credential) -> Credential:
        url = self.settings.token_url(secrets.tenant_id)
        form = {
            "grant_type": "refresh_token",
            "client_id": secrets.client_id,
            "client_secret": secrets.client_secret,
            "refresh_token": credential.refresh_token,
            "scope": credential.scope,
        }
        logger.debug("Requesting new token from %s", url)
        try:
            resp = self.session.post(url, data=form, timeout=self.settings.http_timeout_seconds)
        except requests.RequestException as exc:
            raise AuthError(f"Token request failed: {exc}") from exc

        payload = self._parse_response_body(resp)
        if resp.status_code >= 400:
            logger.error("Token refresh failed (%s): %s", resp.status_code, resp.text)
            detail = payload.get("error_description") if isinstance(payload, dict) else None
            raise AuthError(
                f"Unable to refresh token (HTTP {resp.status_code}): {detail or resp.text}"
            )
        if not isinstance(payload, dict):
            raise AuthError("Token response is not a JSON object")

        try:
            return Credential.from_dict(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise AuthError(f"Token response is missing credential fields: {exc}") from exc

    @staticmethod
    def _parse_response_body(response) -> dict | str:
        try:
            return response.json()
        except ValueError:
            return response.text
