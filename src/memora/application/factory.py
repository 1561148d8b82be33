"""
Repository Factory
Centralizes the logic for selecting the review store adapter.
"""

from memora.application.config import AppConfig
from memora.application.scheduling.service import ReviewService
from memora.domain.scheduling.ports import ReviewRepository
from memora.infrastructure.adapters.store import YamlReviewRepository


def get_review_repository(config: AppConfig) -> ReviewRepository:
    """
    Returns the ReviewRepository implementation configured for this run.
    """
    return YamlReviewRepository(config.store_path)


def get_review_service(config: AppConfig) -> ReviewService:
    return ReviewService(get_review_repository(config))
