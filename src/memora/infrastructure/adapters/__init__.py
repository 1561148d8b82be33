# Infrastructure Store Adapters Package
from .store import InMemoryReviewRepository, YamlReviewRepository

__all__ = ["InMemoryReviewRepository", "YamlReviewRepository"]
