# app/utils/test_datetime_utils.py
"""
시간 관리 유틸리티 기능 테스트

사용법: python -m pytest app/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, date, timezone, timedelta
from app.utils.datetime_utils import DateTimeUtils

def test_parse_iso_datetime():
    """ISO 포맷 파싱 테스트"""
    test_cases = [
        "2024-01-15T10:30:00Z",
        "2024-01-15T10:30:00+09:00",
        "2024-01-15T10:30:00.123456Z",
        "2024-01-15T10:30:00",
        "2024-01-15",
    ]

    for iso_string in test_cases:
        dt = DateTimeUtils.parse_iso_datetime(iso_string)
        assert isinstance(dt, datetime)
        assert dt.tzinfo == timezone.utc  # UTC로 정규화되어야 함

def test_parse_iso_datetime_normalizes_offset_to_utc():
    dt = DateTimeUtils.parse_iso_datetime("2024-07-01T02:00:00+09:00")
    assert dt == datetime(2024, 6, 30, 17, 0, tzinfo=timezone.utc)

def test_parse_strict_date():
    assert DateTimeUtils.parse_strict_date("2024-07-05") == date(2024, 7, 5)

    for invalid in ["2024/07/05", "07-05-2024", "2024-07-05T10:00:00", "2024-13-01", "", None]:
        with pytest.raises(ValueError):
            DateTimeUtils.parse_strict_date(invalid)

def test_to_iso_string_always_has_microseconds():
    """같은 초 안의 값도 문자열 정렬이 시간 순서와 일치해야 함"""
    whole = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
    later = whole + timedelta(microseconds=500)

    whole_str = DateTimeUtils.to_iso_string(whole)
    later_str = DateTimeUtils.to_iso_string(later)

    assert whole_str == "2024-01-01T10:00:00.000000Z"
    assert whole_str < later_str

def test_to_iso_string_converts_naive_and_offset():
    naive = datetime(2024, 1, 1, 10, 0)
    kst = datetime(2024, 1, 1, 19, 0, tzinfo=timezone(timedelta(hours=9)))
    assert DateTimeUtils.to_iso_string(naive) == DateTimeUtils.to_iso_string(kst)

def test_now_iso_round_trips():
    stamp = DateTimeUtils.now_iso()
    assert stamp.endswith('Z')
    assert DateTimeUtils.parse_iso_datetime(stamp).tzinfo == timezone.utc

def test_to_utc_date():
    assert DateTimeUtils.to_utc_date("2024-07-10T23:30:00Z") == date(2024, 7, 10)
    # KST 자정 직후는 UTC 기준으로 전날
    assert DateTimeUtils.to_utc_date("2024-07-10T00:30:00+09:00") == date(2024, 7, 9)
    assert DateTimeUtils.to_utc_date(None) is None
    assert DateTimeUtils.to_utc_date("") is None
    assert DateTimeUtils.to_utc_date("not-a-date") is None

def test_error_handling():
    """오류 처리 테스트"""
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("invalid-date")

    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("")
