"""Demo tool returning a flattering statement about a person."""

import random
from typing import Optional, Sequence

from src.toolserver.text import capitalize_words

SUPERLATIVES = (
    "an incredibly creative individual",
    "a remarkably intelligent person",
    "an exceptionally talented human being",
    "a genuinely compassionate soul",
    "an absolutely brilliant mind",
    "a truly inspirational character",
    "an amazingly resourceful problem-solver",
    "a wonderfully thoughtful individual",
    "an extraordinarily perceptive thinker",
    "a remarkably resilient person",
    "an impressively dedicated worker",
    "a genuinely kind-hearted individual",
    "an exceptionally insightful person",
    "a fantastically positive influence",
    "an incredibly determined achiever",
    "a profoundly wise individual",
    "a spectacularly talented professional",
    "a delightfully witty conversationalist",
    "an admirably courageous person",
    "a tremendously reliable colleague",
    "a brilliantly innovative thinker",
    "an astoundingly quick learner",
    "a deeply empathetic listener",
    "a marvelously enthusiastic participant",
    "a powerfully persuasive communicator",
    "a refreshingly honest individual",
    "a consistently dependable ally",
    "a strikingly original thinker",
    "a charmingly authentic character",
    "an uncommonly generous soul",
    "a remarkably patient teacher",
    "an exceptionally motivated achiever",
    "a wonderfully optimistic presence",
    "a truly extraordinary talent",
    "an impressively adaptable individual",
    "a genuinely humble leader",
    "a fascinatingly complex personality",
    "a refreshingly straightforward communicator",
    "an admirably persistent problem-solver",
    "a delightfully curious mind",
    "a genuinely thoughtful colleague",
    "a remarkably intuitive decision-maker",
    "an exceptionally collaborative team member",
    "a wonderfully supportive friend",
    "a truly visionary thinker",
    "an impressively detail-oriented professional",
    "a consistently reliable performer",
    "a remarkably versatile individual",
    "a genuinely passionate enthusiast",
    "a truly outstanding human being",
)


class WhoIsTool:
    """Picks a random superlative for a name.

    The random source is injected so tests can seed it.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        superlatives: Sequence[str] = SUPERLATIVES,
    ):
        self.rng = rng or random.Random()
        self.superlatives = tuple(superlatives)

    def who_is(self, fullname: str) -> str:
        return f"{capitalize_words(fullname)} is {self.rng.choice(self.superlatives)}!"
