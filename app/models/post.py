# app/models/post.py
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, List, Dict, Any

from app.utils.datetime_utils import DateTimeUtils

BARTER_POSTS_COLLECTION = "barter_posts"

class PostType(Enum):
    OFFER = "offer"
    REQUEST = "request"

class PostStatus(Enum):
    OPEN = "open"
    CLOSED = "closed"

@dataclass
class AvailabilityRange:
    """게시글이 교환 가능한 기간. start/end는 ISO-8601 문자열로 저장됩니다."""
    start: Optional[str] = None
    end: Optional[str] = None

    def contains(self, day) -> bool:
        """
        주어진 날짜(date)가 UTC 기준 [start, end] 달력 날짜 범위 안에 있는지 확인합니다.
        시각은 무시하며, 어느 한쪽이라도 해석할 수 없으면 False입니다.
        """
        start_date = DateTimeUtils.to_utc_date(self.start)
        end_date = DateTimeUtils.to_utc_date(self.end)
        if start_date is None or end_date is None:
            return False
        return start_date <= day <= end_date

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AvailabilityRange":
        return cls(start=data.get('start'), end=data.get('end'))

@dataclass
class BarterPost:
    """
    Firestore 'barter_posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    display_name / profile_image_url 은 작성 시점의 작성자 정보 사본입니다.
    """
    post_id: str
    user_id: str
    title: str
    description: str
    type: str
    tags: List[str] = field(default_factory=list)
    preferred_exchange: Optional[str] = None
    image_url: Optional[str] = None
    location: Optional[str] = None
    availability: List[AvailabilityRange] = field(default_factory=list)
    status: str = PostStatus.OPEN.value
    created_at: str = field(default_factory=DateTimeUtils.now_iso)
    display_name: Optional[str] = None
    profile_image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

