# app/api/posts/filtering.py
"""
게시글 목록 조회 파이프라인에서 Firestore가 직접 처리하지 못하는 부분을 담당하는 순수 함수 모음.

- 검색어 부분 일치 (제목/설명/희망 교환 품목, 대소문자 무시)
- 가용 날짜 포함 여부 (UTC 달력 날짜 기준, 양 끝 포함)
- 수동 페이지네이션

모든 필터는 입력 순서를 유지하므로, 쿼리 단계의 created_at 내림차순 정렬이 그대로 보존됩니다.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

from app.models.post import AvailabilityRange, PostStatus
from app.services.firestore_service import ARRAY_CONTAINS_ANY_LIMIT
from app.utils.datetime_utils import DateTimeUtils

SEARCHABLE_FIELDS = ('title', 'description', 'preferred_exchange')

@dataclass
class PostFilterCriteria:
    """게시글 목록 조회 조건. 값이 None/빈 값인 조건은 적용하지 않습니다."""
    uploader_id: Optional[str] = None
    search_term: Optional[str] = None
    tags: Optional[List[str]] = None
    location: Optional[str] = None
    availability: Optional[str] = None
    status: Optional[str] = None
    page: int = 0
    size: int = 10

    @property
    def effective_status(self) -> str:
        return self.status or PostStatus.OPEN.value

def usable_tag_filter(tags: Optional[List[str]]) -> Optional[List[str]]:
    """
    Firestore array-contains-any 조건으로 넘길 태그 목록을 결정합니다.
    10개를 넘으면 Firestore 제약 때문에 태그 조건 없이 조회하며, 경고 로그만 남깁니다.
    (메모리에서 다시 거르지 않습니다. 알려진 제약 사항)
    """
    if not tags:
        return None
    if len(tags) > ARRAY_CONTAINS_ANY_LIMIT:
        logging.warning(
            f"태그 조건이 {len(tags)}개로 Firestore array-contains-any 한도({ARRAY_CONTAINS_ANY_LIMIT})를 넘어 "
            f"태그 필터 없이 조회합니다: {tags}")
        return None
    return list(tags)

def matches_search_term(post: Dict[str, Any], lowered_term: str) -> bool:
    for field_name in SEARCHABLE_FIELDS:
        value = post.get(field_name)
        if value and lowered_term in value.lower():
            return True
    return False

def filter_by_search_term(posts: List[Dict[str, Any]], search_term: Optional[str]) -> List[Dict[str, Any]]:
    """제목, 설명, 희망 교환 품목 중 하나라도 검색어를 포함하는 게시글만 남깁니다."""
    if not search_term:
        return posts
    lowered_term = search_term.lower()
    return [post for post in posts if matches_search_term(post, lowered_term)]

def parse_availability_filter(value: Optional[str]) -> Optional[date]:
    """
    'YYYY-MM-DD' 필터 값을 date로 변환합니다.
    형식이 잘못된 경우 요청을 실패시키지 않고 필터를 적용하지 않습니다(None).
    """
    if not value:
        return None
    try:
        return DateTimeUtils.parse_strict_date(value)
    except ValueError:
        logging.warning(f"가용 날짜 필터 형식이 올바르지 않아 무시합니다: {value}")
        return None

def is_available_on(post: Dict[str, Any], day: date) -> bool:
    """게시글의 가용 기간 중 하나라도 day를 포함하면 True. 기간이 없으면 False."""
    for raw_range in post.get('availability') or []:
        availability_range = raw_range if isinstance(raw_range, AvailabilityRange) \
            else AvailabilityRange.from_dict(raw_range or {})
        if availability_range.contains(day):
            return True
    return False

def filter_by_availability(posts: List[Dict[str, Any]], day: Optional[date]) -> List[Dict[str, Any]]:
    if day is None:
        return posts
    return [post for post in posts if is_available_on(post, day)]

def paginate(items: List[Any], page: int, size: int) -> List[Any]:
    """
    [page*size, min((page+1)*size, len)) 구간을 잘라 반환합니다.
    시작 위치가 목록 길이를 넘으면 빈 목록을 반환합니다.
    """
    start = page * size
    if start >= len(items):
        return []
    return items[start:min(start + size, len(items))]
