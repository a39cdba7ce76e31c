# app/services/identity_service.py

import logging
from typing import NamedTuple, Optional

from firebase_admin import auth as firebase_auth

from app.core.exceptions import UnavailableError

class VerifiedIdentity(NamedTuple):
    """ID 토큰 검증 결과."""
    uid: Optional[str]
    email: Optional[str]
    valid: bool

INVALID_IDENTITY = VerifiedIdentity(uid=None, email=None, valid=False)

class IdentityService:
    """
    Firebase Authentication ID 토큰 검증을 담당하는 서비스 클래스입니다.
    만료/위조/형식 오류 등 어떤 이유로 실패하든 호출자에게는 동일하게 valid=False를 돌려줍니다.
    """

    def __init__(self, auth_client=None):
        # 테스트에서는 verify_id_token을 가진 가짜 객체를 주입합니다.
        self.auth = auth_client or firebase_auth

    def verify_token(self, id_token: Optional[str]) -> VerifiedIdentity:
        """
        Bearer 토큰 문자열을 검증하고 (uid, email, valid)를 반환합니다.

        :param id_token: 클라이언트가 Authorization 헤더로 보낸 Firebase ID 토큰
        """
        if not id_token or not id_token.strip():
            return INVALID_IDENTITY

        try:
            decoded_token = self.auth.verify_id_token(id_token)
        except firebase_auth.CertificateFetchError as e:
            # 토큰 문제가 아니라 공개키 조회 실패이므로 서버 오류로 처리
            logging.error(f"Firebase 공개키 조회 실패: {e}", exc_info=True)
            raise UnavailableError("인증 서버에 연결할 수 없습니다.") from e
        except (ValueError, firebase_auth.InvalidIdTokenError, firebase_auth.UserDisabledError) as e:
            logging.warning(f"Firebase ID 토큰 검증 실패: {type(e).__name__}")
            return INVALID_IDENTITY

        uid = decoded_token.get('uid') or decoded_token.get('sub')
        if not uid:
            logging.warning("검증된 토큰에 uid가 없습니다.")
            return INVALID_IDENTITY

        return VerifiedIdentity(uid=uid, email=decoded_token.get('email'), valid=True)
