"""Guess-the-number game driven by two elicitation rounds."""

import logging
import random
from typing import Any, Optional, Protocol, Tuple, Type

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Guess the number"
LOW_RANGE = "0-10"
HIGH_RANGE = "11-20"
DECLINED_MESSAGE = "Maybe next time!"
CORRECT_MESSAGE = "You guessed correctly!"


class ElicitingContext(Protocol):
    """The part of the MCP request context the game needs."""

    async def elicit(self, message: str, schema: Type[BaseModel]) -> Any:
        ...


class PlayInvitation(BaseModel):
    answer: bool = Field(description="Do you want to play?")
    options: str = Field(
        default=LOW_RANGE,
        description=f"Number range, either {LOW_RANGE} or {HIGH_RANGE}",
    )
    title: Optional[str] = Field(
        default=None, max_length=30, description="The title of the game"
    )
    date: Optional[str] = Field(default=None, description="Enter a date: DD/MM/YYYY")


class LowRangeGuess(BaseModel):
    answer: int = Field(ge=0, le=10, description="Enter a value between 0 and 10")


class HighRangeGuess(BaseModel):
    answer: int = Field(ge=11, le=20, description="Enter a value between 11 and 20")


def _accepted(response: Any) -> bool:
    return getattr(response, "action", None) == "accept" and getattr(response, "data", None) is not None


class GuessTheNumberGame:
    """Asks the client whether to play, then asks for a guess.

    The secret number comes from the injected random source and is drawn
    from the half-open range of the chosen option.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    @staticmethod
    def guess_range(option: Optional[str]) -> Tuple[int, int, Type[BaseModel]]:
        if option == LOW_RANGE:
            return 0, 10, LowRangeGuess
        return 11, 20, HighRangeGuess

    async def play(self, ctx: ElicitingContext) -> str:
        invitation = await ctx.elicit(
            message="Do you want to play a game?", schema=PlayInvitation
        )
        if not _accepted(invitation) or not invitation.data.answer:
            return DECLINED_MESSAGE

        title = invitation.data.title or DEFAULT_TITLE
        logger.info("Starting guessing game", extra={"title": title})
        low, high, guess_schema = self.guess_range(invitation.data.options)

        guess_response = await ctx.elicit(message=title, schema=guess_schema)
        answer = guess_response.data.answer if _accepted(guess_response) else None
        correct_answer = self.rng.randrange(low, high)
        logger.info("Received guess", extra={"guess": answer})

        if answer == correct_answer:
            return CORRECT_MESSAGE
        return f"You guessed wrong! Correct answer was {correct_answer}"
