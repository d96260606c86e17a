"""
Synthetic chat completion.

There is no model behind this service: answers come from a few canned
templates and the token count is estimated from text length, so the rest of
the system can be exercised without an AI provider.
"""
import logging
import math
import random
import time
from dataclasses import dataclass
from typing import Optional

from config import settings

logger = logging.getLogger(__name__)

ANSWER_TEMPLATES = (
    'This is a mocked response to: "{question}". In a real implementation, this would be an AI-generated answer.',
    'Based on your question "{question}", here\'s a simulated AI response. The actual implementation would use a hosted language model.',
    'Mocked AI response: I understand you\'re asking about "{question}". Here\'s a generated answer for demonstration purposes.',
)

CHARS_PER_TOKEN = 4


@dataclass(frozen=True)
class Completion:
    answer: str
    tokens: int


def estimate_tokens(question: str, answer: str) -> int:
    """Roughly one token per four characters of prompt plus answer."""
    return math.ceil((len(question) + len(answer)) / CHARS_PER_TOKEN)


class AIService:
    """
    Produces answers for chat questions.

    Args:
        delay_range: (min, max) seconds of simulated provider latency.
            ``None`` uses the configured range; ``(0, 0)`` disables it.
        rng: random source, injectable for deterministic tests
    """

    def __init__(self, delay_range: Optional[tuple] = None, rng: Optional[random.Random] = None):
        if delay_range is None:
            delay_range = (settings.CHAT_RESPONSE_DELAY_MIN, settings.CHAT_RESPONSE_DELAY_MAX)
        self.delay_min, self.delay_max = delay_range
        self.rng = rng or random.Random()

    def _simulate_latency(self):
        if self.delay_max <= 0:
            return
        delay = self.rng.uniform(self.delay_min, self.delay_max)
        logger.debug(f"Simulating AI latency of {delay:.2f}s")
        time.sleep(delay)

    def generate(self, question: str) -> Completion:
        self._simulate_latency()
        template = self.rng.choice(ANSWER_TEMPLATES)
        answer = template.format(question=question)
        return Completion(answer=answer, tokens=estimate_tokens(question, answer))
