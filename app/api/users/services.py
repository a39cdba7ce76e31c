# app/api/users/services.py
import logging
from typing import Optional, Dict, Any, List

from marshmallow import ValidationError

from app.core.exceptions import NotFoundError, AuthorizationError, UnavailableError
from app.models.user import USER_PROFILES_COLLECTION, UserProfile
from app.services.firestore_service import FirestoreService
from app.services.storage_service import StorageService, ImageUpload

# 프로필 수정으로 바꿀 수 있는 필드. rating은 리뷰 집계만, profile_image_url은 업로드 처리만 갱신합니다.
UPDATABLE_FIELDS = ('display_name', 'location', 'bio', 'skills_offered', 'needs')

class UserProfileService:
    """
    사용자 프로필 관련 비즈니스 로직을 담당하는 서비스 클래스.
    프로필 문서 ID는 Firebase Auth uid와 같습니다.
    """
    def __init__(self, store: FirestoreService, storage_service: StorageService):
        self.store = store
        self.storage = storage_service

    def get_all_profiles(self) -> List[Dict[str, Any]]:
        profiles = self.store.query(USER_PROFILES_COLLECTION, id_field='user_id')
        return [UserProfile.from_dict(p).to_dict() for p in profiles]

    def get_profile(self, user_id: str) -> Dict[str, Any]:
        """프로필을 조회합니다. 비어 있는 rating/bio/목록 필드는 기본값으로 채워 반환합니다."""
        profile = self.store.get(USER_PROFILES_COLLECTION, user_id, id_field='user_id')
        if profile is None:
            raise NotFoundError(f"사용자 프로필을 찾을 수 없습니다 (user_id: {user_id}).")
        return UserProfile.from_dict(profile).to_dict()

    def _check_owner(self, user_id: str, requester_id: str):
        if user_id != requester_id:
            logging.warning(f"프로필 권한 없음 (user_id: {user_id}, requester: {requester_id})")
            raise AuthorizationError("본인의 프로필만 수정하거나 삭제할 수 있습니다.")

    def create_profile(self, user_id: str, email: Optional[str], data: Dict[str, Any],
                       image: Optional[ImageUpload] = None) -> Dict[str, Any]:
        """
        인증된 uid로 프로필을 생성합니다. 같은 uid의 프로필이 이미 있으면 ValidationError.
        rating은 요청 값과 관계없이 0.0으로 시작합니다.
        """
        if self.store.get(USER_PROFILES_COLLECTION, user_id) is not None:
            raise ValidationError({"user_id": ["이미 프로필이 존재하는 사용자입니다."]})

        profile_image_url = self.storage.upload_image(image) if image else None
        profile = UserProfile(
            user_id=user_id,
            display_name=data['display_name'],
            email=email or data.get('email'),
            location=data.get('location'),
            bio=data.get('bio') or "",
            skills_offered=list(data.get('skills_offered') or []),
            needs=list(data.get('needs') or []),
            profile_image_url=profile_image_url,
        )

        try:
            self.store.set(USER_PROFILES_COLLECTION, user_id, profile.to_dict())
        except UnavailableError:
            if image:
                self.storage.delete_image_quietly(profile_image_url, f"profile {user_id} (생성 실패)")
            raise

        logging.info(f"프로필 생성 완료 (user_id: {user_id})")
        return profile.to_dict()

    def update_profile(self, user_id: str, requester_id: str, data: Dict[str, Any],
                       image: Optional[ImageUpload] = None, remove_image: bool = False) -> Dict[str, Any]:
        """
        본인 프로필의 전달된 필드만 부분 업데이트합니다. rating 필드는 절대 쓰지 않습니다.
        이미지 교체/제거 시 기존 이미지는 문서 갱신 이후 best-effort로 삭제합니다.
        """
        self._check_owner(user_id, requester_id)
        profile = self.get_profile(user_id)
        old_image_url = profile.get('profile_image_url')

        fields = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}
        if image:
            fields['profile_image_url'] = self.storage.upload_image(image)
        elif remove_image:
            fields['profile_image_url'] = None

        if not fields:
            return profile

        try:
            self.update_profile_fields(user_id, fields)
        except (UnavailableError, NotFoundError):
            if image:
                self.storage.delete_image_quietly(fields['profile_image_url'], f"profile {user_id} (수정 실패)")
            raise

        if old_image_url and 'profile_image_url' in fields and fields['profile_image_url'] != old_image_url:
            self.storage.delete_image_quietly(old_image_url, f"profile {user_id}")

        logging.info(f"프로필 수정 완료 (user_id: {user_id}, fields: {sorted(fields)})")
        profile.update(fields)
        return profile

    def update_profile_fields(self, user_id: str, fields: Dict[str, Any]) -> None:
        """지정한 필드만 갱신합니다. 프로필이 없으면 NotFoundError."""
        self.store.update_fields(USER_PROFILES_COLLECTION, user_id, fields)

    def delete_profile(self, user_id: str, requester_id: str) -> None:
        self._check_owner(user_id, requester_id)
        profile = self.get_profile(user_id)
        self.store.delete(USER_PROFILES_COLLECTION, user_id)
        logging.info(f"프로필 삭제 완료 (user_id: {user_id})")
        self.storage.delete_image_quietly(profile.get('profile_image_url'), f"profile {user_id}")
