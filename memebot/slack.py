"""
Slack transport: feeds message events to the MemeBot and posts its replies.
"""
import time

from slack_bolt import App
from slack_sdk import WebClient

from memebot.bot import MemeBot, ReplyOutcome
from memebot.logger import logger
from memebot.metrics import InvocationCounter
from memebot.singleflight import SingleFlight


class SlackBotIdentity:
    """
    The bot's display name and user ID, looked up once with auth.test.
    """

    def __init__(self, client: WebClient):
        self._client = client
        self._lookup: SingleFlight[tuple[str, str]] = SingleFlight(self._auth_test)

    def _auth_test(self) -> tuple[str, str]:
        response = self._client.auth_test()
        name, user_id = response["user"], response["user_id"]
        logger.info("memebot ready as @%s (%s)", name, user_id)
        return name, user_id

    def get(self) -> tuple[str, str]:
        return self._lookup.do()


def should_ignore(event: dict) -> bool:
    # Edits, joins and messages from bots (including our own replies).
    return bool(event.get("subtype") or event.get("bot_id"))


def create_slack_app(
    bot: MemeBot,
    counter: InvocationCounter,
    token: str,
    signing_secret: str,
) -> App:
    slack_app = App(
        token=token,
        signing_secret=signing_secret,
        # Ensure Slack gets an ACK within 3 seconds even if processing is longer
        process_before_response=True,
    )
    identity = SlackBotIdentity(slack_app.client)

    @slack_app.event("message")
    def handle_message(event, say):
        received_at = time.monotonic()
        if should_ignore(event):
            return

        text = event.get("text", "") or ""
        try:
            bot_name, bot_id = identity.get()
            outcome = bot.reply_to(bot_name, bot_id, text, send=say, received_at=received_at)
        except Exception:
            logger.exception("Failed to handle message in channel %s", event.get("channel"))
            return

        if outcome is not ReplyOutcome.NO_REPLY:
            counter.record_reply(outcome is ReplyOutcome.SENT)

    return slack_app
