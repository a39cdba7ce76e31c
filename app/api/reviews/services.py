# app/api/reviews/services.py
import logging
from typing import Dict, Any, List

from marshmallow import ValidationError

from app.api.reviews.rating import RatingAggregator
from app.core.exceptions import NotFoundError, AuthorizationError
from app.models.review import REVIEWS_COLLECTION, MIN_RATING, MAX_RATING, Review, ReviewUser
from app.models.user import USER_PROFILES_COLLECTION
from app.services.firestore_service import FirestoreService, DESCENDING
from app.utils.profile_snapshot import owner_snapshot, distinct_ids

class ReviewService:
    """
    리뷰 관련 비즈니스 로직을 담당하는 서비스 클래스.
    리뷰는 생성 후 수정할 수 없고, 생성/삭제 직후 받는 사람의 평균 평점을 다시 계산합니다.
    """
    def __init__(self, store: FirestoreService, rating_aggregator: RatingAggregator):
        self.store = store
        self.rating_aggregator = rating_aggregator

    def create_review(self, reviewer_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        리뷰를 생성합니다.

        :param reviewer_id: 인증된 작성자 uid
        :param data: ReviewCreateSchema로 검증된 데이터 (rating, to_user_id, comment, barter_post_id, from_user_id)
        """
        rating = data.get('rating')
        if not isinstance(rating, int) or isinstance(rating, bool) or not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError({"rating": [f"평점은 {MIN_RATING}~{MAX_RATING} 사이의 정수여야 합니다."]})

        to_user_id = data.get('to_user_id')
        if not to_user_id:
            raise ValidationError({"to_user_id": ["리뷰 대상 사용자는 필수입니다."]})

        claimed_reviewer = data.get('from_user_id')
        if claimed_reviewer and claimed_reviewer != reviewer_id:
            logging.warning(f"리뷰 작성자 불일치 (token: {reviewer_id}, body: {claimed_reviewer})")
            raise AuthorizationError("다른 사용자의 이름으로 리뷰를 작성할 수 없습니다.")

        if self.store.get(USER_PROFILES_COLLECTION, to_user_id) is None:
            raise NotFoundError(f"리뷰 대상 사용자를 찾을 수 없습니다 (user_id: {to_user_id}).")

        display_name, _ = owner_snapshot(self.store.get(USER_PROFILES_COLLECTION, reviewer_id))
        review = Review(
            review_id=self.store.new_id(REVIEWS_COLLECTION),
            rating=rating,
            from_user_id=reviewer_id,
            to_user_id=to_user_id,
            from_user=ReviewUser(user_id=reviewer_id, display_name=display_name),
            comment=data.get('comment'),
            barter_post_id=data.get('barter_post_id'),
        )
        self.store.set(REVIEWS_COLLECTION, review.review_id, review.to_dict())
        logging.info(f"리뷰 생성 완료 (review_id: {review.review_id}, to_user_id: {to_user_id})")

        self.rating_aggregator.recalculate(to_user_id)
        return review.to_dict()

    def get_review(self, review_id: str) -> Dict[str, Any]:
        review = self.store.get(REVIEWS_COLLECTION, review_id, id_field='review_id')
        if review is None:
            raise NotFoundError(f"리뷰를 찾을 수 없습니다 (review_id: {review_id}).")
        return self._with_current_reviewers([review])[0]

    def get_all_reviews(self) -> List[Dict[str, Any]]:
        return self._list_reviews({})

    def get_reviews_received(self, user_id: str) -> List[Dict[str, Any]]:
        return self._list_reviews({'to_user_id': user_id})

    def get_reviews_written(self, user_id: str) -> List[Dict[str, Any]]:
        return self._list_reviews({'from_user_id': user_id})

    def get_reviews_for_post(self, post_id: str) -> List[Dict[str, Any]]:
        return self._list_reviews({'barter_post_id': post_id})

    def delete_review(self, review_id: str, requester_id: str) -> None:
        """리뷰 작성자 본인만 삭제할 수 있습니다. 삭제 후 받는 사람의 평점을 다시 계산합니다."""
        review = self.store.get(REVIEWS_COLLECTION, review_id)
        if review is None:
            raise NotFoundError(f"리뷰를 찾을 수 없습니다 (review_id: {review_id}).")
        if review.get('from_user_id') != requester_id:
            logging.warning(f"리뷰 삭제 권한 없음 (review_id: {review_id}, requester: {requester_id})")
            raise AuthorizationError("리뷰 작성자만 삭제할 수 있습니다.")

        self.store.delete(REVIEWS_COLLECTION, review_id)
        logging.info(f"리뷰 삭제 완료 (review_id: {review_id})")

        self.rating_aggregator.recalculate(review.get('to_user_id'))

    # --- 내부 헬퍼 ---
    def _list_reviews(self, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        reviews = self.store.query(REVIEWS_COLLECTION, filters=filters, order_by='created_at',
                                   direction=DESCENDING, id_field='review_id')
        return self._with_current_reviewers(reviews)

    def _with_current_reviewers(self, reviews: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """작성자 표시 이름을 현재 프로필 기준으로 다시 채웁니다. 프로필은 호출당 한 번만 조회합니다."""
        profiles = self.store.get_many(USER_PROFILES_COLLECTION, distinct_ids(reviews, 'from_user_id'))
        resolved = []
        for review in reviews:
            reviewer_id = review.get('from_user_id')
            display_name, _ = owner_snapshot(profiles.get(reviewer_id))
            resolved.append({**review, 'from_user': {'user_id': reviewer_id, 'display_name': display_name}})
        return resolved
