# app/core/exceptions.py
"""
서비스 계층에서 사용하는 도메인 예외 모음.

입력값 검증 오류는 별도 클래스를 두지 않고 marshmallow.ValidationError를 그대로 사용합니다.
(스키마 검증과 서비스 검증이 같은 400 응답 형식을 공유하도록 하기 위함)
"""


class NotFoundError(LookupError):
    """참조한 리소스가 존재하지 않을 때 발생합니다. (HTTP 404)"""


class AuthorizationError(PermissionError):
    """인증은 되었으나 해당 리소스의 소유자/참여자가 아닐 때 발생합니다. (HTTP 403)"""


class UnavailableError(RuntimeError):
    """Firestore, Storage, Auth 등 외부 백엔드 호출이 실패했을 때 발생합니다. (HTTP 500)"""


class MediaStoreError(UnavailableError):
    """이미지 업로드/삭제 실패. URL 형식이 잘못된 경우도 포함합니다."""
