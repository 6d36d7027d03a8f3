"""Notification service for announcing solved problems on Discord."""
import logging
from urllib.parse import quote
import requests

from .errors import DeliveryError

logger = logging.getLogger(__name__)

EMBED_COLOR = 0xaef4ae

PRONOUN_VERBS = {
    "he/him": "wbił",
    "she/her": "wbiła",
    "they/them": "wbiło",
}


def format_message(user_name, pronouns, contest_name, problem_name, done, total):
    """Build the embed description for a solve."""
    verb = PRONOUN_VERBS.get(pronouns, PRONOUN_VERBS["he/him"])
    # Contests without problems must not divide by zero
    percent = round(100 * done / total) if total else 0
    return (f"**{user_name}** właśnie {verb} zadanie **{problem_name}** "
            f"z contestu **{contest_name}** ({done}/{total}, {percent}%)")


class NotificationService:
    """Sends solve messages to a Discord channel and reacts to them."""

    def __init__(self, config):
        """Initialize the notification service with configuration."""
        self.config = config
        self.channel_url = (
            f"{config.DISCORD_API_URL.rstrip('/')}/channels/{config.DISCORD_CHANNEL_ID}")
        self.headers = {"Authorization": f"Bot {config.DISCORD_TOKEN}"}
        self.timeout = config.REQUEST_TIMEOUT

    def notify(self, user_name, pronouns, contest_name, problem_id, problem_name, done, total):
        """Send a solve message and return its message id.

        Raises DeliveryError if the message could not be sent. A failed
        acknowledgement reaction is only logged.
        """
        description = format_message(
            user_name, pronouns, contest_name, problem_name, done, total)
        payload = {"embeds": [{"description": description, "color": EMBED_COLOR}]}

        try:
            response = requests.post(
                f"{self.channel_url}/messages",
                json=payload, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise DeliveryError(f"Error sending message: {e}") from e

        if response.status_code != 200:
            raise DeliveryError(
                f"Status {response.status_code}: {response.text}",
                status_code=response.status_code)

        try:
            message_id = response.json()["id"]
        except (ValueError, KeyError, TypeError) as e:
            raise DeliveryError(f"Cannot read message id from response: {e}") from e

        logger.info("Announced problem %s solved by %s in %s (message %s)",
                    problem_id, user_name, contest_name, message_id)

        if self.config.DISCORD_REACTION:
            self._react(message_id)
        return message_id

    def _react(self, message_id):
        """Add the acknowledgement reaction, logging instead of raising on failure."""
        url = (f"{self.channel_url}/messages/{message_id}/reactions/"
               f"{quote(self.config.DISCORD_REACTION)}/@me")
        try:
            response = requests.put(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Failed to add reaction to message %s: %s", message_id, e)
            return False
        if response.status_code != 204:
            logger.warning("Failed to add reaction to message %s. Status code: %s, Response: %s",
                           message_id, response.status_code, response.text)
            return False
        return True
