# app/models/user.py
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any

from app.utils.datetime_utils import DateTimeUtils

USER_PROFILES_COLLECTION = "user_profiles"

@dataclass
class UserProfile:
    """
    Firestore 'user_profiles' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    문서 ID는 Firebase Auth의 uid와 동일합니다.
    rating 은 리뷰 집계(RatingAggregator)만 갱신하는 파생 값입니다.
    """
    user_id: str
    display_name: str
    email: Optional[str] = None
    location: Optional[str] = None
    bio: str = ""
    skills_offered: List[str] = field(default_factory=list)
    needs: List[str] = field(default_factory=list)
    rating: float = 0.0
    created_at: str = field(default_factory=DateTimeUtils.now_iso)
    profile_image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        """
        Firestore 딕셔너리로부터 인스턴스를 생성합니다.
        오래된 문서에 비어 있을 수 있는 rating/bio/리스트 필드는 기본값으로 채웁니다.
        """
        processed_data = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if processed_data.get('rating') is None:
            processed_data['rating'] = 0.0
        if processed_data.get('bio') is None:
            processed_data['bio'] = ""
        processed_data['skills_offered'] = list(processed_data.get('skills_offered') or [])
        processed_data['needs'] = list(processed_data.get('needs') or [])
        return cls(**processed_data)
