from __future__ import annotations
from datetime import date, datetime
from typing import Callable
import structlog
from flagbot.schemas.records import ChallengeRecord
from flagbot.services.intents import Intent, ParsedIntent, classify, normalize
from flagbot.services.store import Store
from flagbot.services.submission_code import check_submission, generate_code

log = structlog.get_logger()

# Never echo the requested name here: it is attacker-controlled until the
# challenge is known to exist.
UNKNOWN_CHALLENGE = "unknown challenge :("
STAIRS_REPLY = "i am protected."
PROTECTED_REPLY = "the internet makes you stupid. :D"


def _verdict(is_correct: bool) -> str:
    return "CORRECT" if is_correct else "incorrect"


class IncomingHandler:
    """
    Turns one inbound message into store calls and at most one queued reply.

    `code_factory` mints submission codes and `today` supplies the date that
    challenge windows are compared against; both are injectable for tests.
    """

    def __init__(
        self,
        store: Store,
        *,
        code_factory: Callable[[], str] = generate_code,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.code_factory = code_factory
        self.today = today

    async def handle(self, username: str, user_type: str, message: str, created_at: datetime) -> None:
        log.debug(
            "incoming_message",
            username=username, user_type=user_type,
            created_at=created_at.isoformat(), text=normalize(message),
        )
        parsed = classify(message)
        await self.dispatch(username, user_type, parsed, created_at)

    async def dispatch(self, username: str, user_type: str, parsed: ParsedIntent, created_at: datetime) -> None:
        intent = parsed.intent
        if intent is Intent.REQUEST_CODE:
            await self.register_user(username, user_type)
        elif intent is Intent.SUBMIT:
            await self.submit_answer(username, user_type, parsed.challenge_name, parsed.hash, created_at)
        elif intent is Intent.CHECK:
            await self.check_answer(username, user_type, parsed.challenge_name)
        elif intent is Intent.REQUEST_SECRET:
            await self.send_secret(username, user_type)
        elif intent is Intent.EASTER_EGG_STAIRS:
            await self.store.queue_dm(username, user_type, STAIRS_REPLY)
        elif intent is Intent.EASTER_EGG_PROTECTED:
            await self.store.queue_dm(username, user_type, PROTECTED_REPLY)
        elif intent is Intent.CHALLENGE_INFO:
            await self.challenge_info(username, user_type, parsed.challenge_name)
        elif intent is Intent.REQUEST_HELP:
            await self.send_help(username, user_type)
        # NO_MATCH: ignored without a reply

    async def _ensure_code(self, username: str, user_type: str) -> str:
        code = await self.store.get_code(username, user_type)
        if code is not None:
            return code
        await self.store.register_user(username, user_type, self.code_factory())
        # re-read so a concurrent first registration reports the code that was kept
        code = await self.store.get_code(username, user_type)
        log.info("user_registered", username=username, user_type=user_type)
        return code

    async def register_user(self, username: str, user_type: str) -> None:
        code = await self._ensure_code(username, user_type)
        await self.store.queue_dm(username, user_type, f"your submission code is {code}")

    async def _open_challenge(self, username: str, user_type: str, name: str) -> ChallengeRecord | None:
        """Fetch a challenge that has started, replying on the user's behalf otherwise."""
        challenge = await self.store.get_challenge(name)
        if challenge is None:
            await self.store.queue_dm(username, user_type, UNKNOWN_CHALLENGE)
            return None
        if challenge.date_begin > self.today():
            msg = f"{name} has not started. begins {challenge.date_begin.isoformat()}"
            await self.store.queue_dm(username, user_type, msg)
            return None
        return challenge

    async def submit_answer(
        self, username: str, user_type: str, name: str, submitted: str, created_at: datetime
    ) -> None:
        challenge = await self._open_challenge(username, user_type, name)
        if challenge is None:
            return

        user = await self.store.get_user(username, user_type)
        if user is None:
            # registered silently: this message gets exactly one reply
            await self._ensure_code(username, user_type)
            user = await self.store.get_user(username, user_type)

        is_correct = check_submission(user.code, challenge.solutions, submitted)
        if challenge.date_end <= self.today():
            # Closed challenges are scored but never written, so histories stay fixed.
            log.info("submission_evaluated_after_close", username=username, user_type=user_type, challenge=name)
            msg = f"{name} submission is {_verdict(is_correct)}"
        else:
            await self.store.add_or_update_submission(user.id, challenge.id, is_correct, submitted, created_at)
            log.info("submission_recorded", username=username, user_type=user_type, challenge=name)
            msg = f"{name} answer received. challenge ends {challenge.date_end.isoformat()}"
        await self.store.queue_dm(username, user_type, msg)

    async def check_answer(self, username: str, user_type: str, name: str) -> None:
        challenge = await self._open_challenge(username, user_type, name)
        if challenge is None:
            return

        if challenge.date_end <= self.today():
            sub = await self.store.get_submission(username, user_type, challenge.id)
            if sub:
                msg = f"{name} = {sub.hash} and is {_verdict(sub.is_correct)}"
            else:
                msg = f"you have not submitted an answer for {name}"
        else:
            msg = f"{name} is still ongoing. challenge ends {challenge.date_end.isoformat()}"
        await self.store.queue_dm(username, user_type, msg)

    async def send_secret(self, username: str, user_type: str) -> None:
        secret = await self.store.get_secret()
        if secret:
            await self.store.queue_dm(username, user_type, secret)

    async def challenge_info(self, username: str, user_type: str, name: str) -> None:
        challenge = await self.store.get_challenge(name)
        if challenge is None:
            await self.store.queue_dm(username, user_type, UNKNOWN_CHALLENGE)
            return
        info = (
            f"{name} can be viewed @ {challenge.url}. "
            f"start={challenge.date_begin.isoformat()}, end={challenge.date_end.isoformat()}"
        )
        await self.store.queue_dm(username, user_type, info)

    async def send_help(self, username: str, user_type: str) -> None:
        config = await self.store.get_config()
        await self.store.queue_dm(username, user_type, config.help_text)
