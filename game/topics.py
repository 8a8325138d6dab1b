"""
Topic provisioning for Blend In.

Supplies the secret topic for a round and the decoy list shown to the faker.
"""

import random
from typing import List, Optional, Sequence

from utils.constants import TOPICS


class TopicProvider:
    """Picks round topics and decoys from a fixed pool."""

    def __init__(self, topics: Optional[Sequence[str]] = None, rng: Optional[random.Random] = None):
        self.topics = list(topics or TOPICS)
        self.rng = rng or random.Random()

    def pick_topic(self) -> str:
        """Choose a random topic from the pool."""
        return self.rng.choice(self.topics)

    def decoys(self, topic: str, count: int) -> List[str]:
        """
        Choose decoy topics for the faker.

        The real topic is never part of the result.
        """
        pool = [t for t in self.topics if t.lower() != topic.lower()]
        count = max(0, min(count, len(pool)))
        return self.rng.sample(pool, count)
