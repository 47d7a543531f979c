"""Teams chat notifications for newly published files."""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Dict

import requests

from .config import Settings
from .errors import NotifyError
from .models import Credential, FileDetail, Secrets

logger = logging.getLogger(__name__)

THUMBNAIL_CARD = "application/vnd.microsoft.card.thumbnail"


def build_message(file: FileDetail, attachment_id: str, card_title: str) -> Dict[str, Any]:
    """Chat message body embedding a thumbnail card with a download button."""
    card = {
        "title": card_title,
        "subtitle": file.subject,
        "text": "Click the link below to download the file",
        "buttons": [
            {
                "type": "openUrl",
                "title": "Download",
                "value": file.link_download,
            }
        ],
    }
    return {
        "body": {
            "content": f'<attachment id="{attachment_id}"></attachment>',
            "contentType": "html",
        },
        "attachments": [
            {
                "id": attachment_id,
                "contentType": THUMBNAIL_CARD,
                "contentUrl": file.link_download,
                "name": file.subject,
                # Graph expects the card as a JSON string, not a nested object.
                "content": json.dumps(card, ensure_ascii=False),
            }
        ],
    }


class ChatNotifier:
    """Post one message per file into the configured chat."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()

    def notify(self, secrets: Secrets, credential: Credential, file: FileDetail) -> None:
        url = self.settings.chat_messages_url(secrets.chat_id)
        headers = {"Authorization": f"Bearer {credential.access_token}"}
        body = build_message(file, str(uuid.uuid4()), self.settings.notification_card_title)

        logger.info("Sending notification for file %s", file.file_id)
        try:
            resp = self.session.post(
                url, headers=headers, json=body, timeout=self.settings.http_timeout_seconds
            )
        except requests.RequestException as exc:
            raise NotifyError(f"Notification for file {file.file_id} failed: {exc}") from exc

        if resp.status_code >= 400:
            logger.error("Graph message failed (%s): %s", resp.status_code, resp.text)
            raise NotifyError(
                f"Notification for file {file.file_id} failed with HTTP {resp.status_code}"
            )
        logger.info("%s", resp.text)
