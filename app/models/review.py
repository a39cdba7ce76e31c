# app/models/review.py
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any

from app.utils.datetime_utils import DateTimeUtils

MIN_RATING = 1
MAX_RATING = 5

REVIEWS_COLLECTION = "reviews"

@dataclass
class ReviewUser:
    """Review 문서 내부에 저장될 작성자 정보."""
    user_id: str
    display_name: Optional[str] = None

@dataclass
class Review:
    """
    Firestore 'reviews' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    생성 후에는 삭제만 가능합니다.
    """
    review_id: str
    rating: int
    from_user_id: str
    to_user_id: str
    from_user: ReviewUser
    comment: Optional[str] = None
    barter_post_id: Optional[str] = None
    created_at: str = field(default_factory=DateTimeUtils.now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
