# app/utils/datetime_utils.py
"""
프로젝트 전체에서 일관된 시간/날짜 처리를 위한 중앙화된 유틸리티 모듈

이 모듈의 목적:
1. 모든 생성/수정 시각을 UTC ISO-8601 문자열로 통일 (Firestore에 문자열로 저장)
2. 문자열 정렬 순서 == 시간 순서가 되도록 포맷 고정
3. 가용 기간(availability) 필터를 위한 날짜 파싱/비교 제공
"""

import logging
from datetime import datetime, date, timezone
from typing import Optional
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

# 필터 입력으로 허용하는 유일한 날짜 형식
DATE_FORMAT = '%Y-%m-%d'

class DateTimeUtils:
    """시간/날짜 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def now_iso() -> str:
        """현재 시각을 created_at/updated_at 용 ISO 문자열로 반환"""
        return DateTimeUtils.to_iso_string(DateTimeUtils.now())

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 UTC datetime 객체로 파싱

        지원 포맷:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00.123456Z
        - 2024-01-15T10:30:00
        - 2024-01-15
        """
        try:
            if not iso_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")

            # 'Z' 접미사 처리 (UTC 표시)
            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)

            # timezone-naive인 경우 UTC로 가정
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)

            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

    @staticmethod
    def parse_strict_date(date_string: str) -> date:
        """
        'YYYY-MM-DD' 형식만 허용하는 날짜 파싱.
        2024/07/05 처럼 다른 구분자를 쓰거나 시간이 붙은 값은 거부합니다.
        """
        if not date_string:
            raise ValueError("빈 문자열은 파싱할 수 없습니다")
        try:
            return datetime.strptime(date_string, DATE_FORMAT).date()
        except (TypeError, ValueError):
            raise ValueError(f"날짜는 YYYY-MM-DD 형식이어야 합니다: {date_string}")

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """
        datetime 객체를 ISO 포맷 문자열로 변환.
        마이크로초를 항상 포함해야 같은 초 안에서도 문자열 정렬이 시간 순서와 일치합니다.
        """
        try:
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            else:
                dt = dt.astimezone(timezone.utc)

            return dt.isoformat(timespec='microseconds').replace('+00:00', 'Z')

        except Exception as e:
            logger.error(f"ISO 문자열 변환 실패: {dt} - {e}")
            raise ValueError(f"datetime 객체를 ISO 문자열로 변환할 수 없습니다: {dt}")

    @staticmethod
    def to_utc_date(value: Optional[str]) -> Optional[date]:
        """
        저장된 ISO 타임스탬프 문자열을 UTC 기준 달력 날짜로 변환합니다.
        값이 없거나 파싱할 수 없으면 None을 반환합니다. (필터링 대상에서 제외하기 위함)
        """
        if not value:
            return None
        try:
            return DateTimeUtils.parse_iso_datetime(value).date()
        except ValueError:
            logger.warning(f"가용 기간 날짜를 해석할 수 없습니다: {value}")
            return None

