# app/api/reviews/rating.py
"""
사용자 평균 평점 재계산.

리뷰가 생성/삭제될 때마다 해당 사용자가 받은 모든 리뷰로 평균을 다시 계산해 프로필의 rating만 갱신합니다.
잠금을 사용하지 않으므로 동시에 들어온 리뷰 변경 사이에서는 잠시 이전 값이 남을 수 있지만,
다음 변경 때 처음부터 다시 계산되므로 결국 올바른 값으로 수렴합니다.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from app.models.review import REVIEWS_COLLECTION
from app.models.user import USER_PROFILES_COLLECTION
from app.services.firestore_service import FirestoreService

RATING_QUANTUM = Decimal('0.01')

def average_rating(ratings: Iterable) -> float:
    """평점들의 평균을 소수 둘째 자리까지 반올림(ROUND_HALF_UP)합니다. 평점이 없으면 0.0."""
    values = [Decimal(str(r)) for r in ratings if r is not None]
    if not values:
        return 0.0
    mean = sum(values) / Decimal(len(values))
    return float(mean.quantize(RATING_QUANTUM, rounding=ROUND_HALF_UP))

class RatingAggregator:
    def __init__(self, store: FirestoreService):
        self.store = store

    def recalculate(self, user_id: str) -> Optional[float]:
        """
        user_id가 받은 리뷰 전체로 평균 평점을 다시 계산해 프로필의 rating 필드만 갱신합니다.
        실패해도 예외를 올리지 않고 로그만 남긴 뒤 None을 반환합니다. (리뷰 변경 자체는 이미 성공한 상태)
        """
        try:
            reviews = self.store.query(REVIEWS_COLLECTION, filters={'to_user_id': user_id})
            rating = average_rating(review.get('rating') for review in reviews)
            self.store.update_fields(USER_PROFILES_COLLECTION, user_id, {'rating': rating})
            logging.info(f"평균 평점 갱신 (user_id: {user_id}, rating: {rating}, reviews: {len(reviews)})")
            return rating
        except Exception as e:
            logging.error(f"평균 평점 재계산 실패 (user_id: {user_id}): {e}", exc_info=True)
            return None
