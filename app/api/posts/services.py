# app/api/posts/services.py
import logging
from typing import Optional, Dict, Any, List

from marshmallow import ValidationError

from app.api.posts.filtering import (
    PostFilterCriteria, usable_tag_filter, filter_by_search_term,
    parse_availability_filter, filter_by_availability, paginate
)
from app.core.exceptions import NotFoundError, AuthorizationError, UnavailableError
from app.models.post import BARTER_POSTS_COLLECTION, AvailabilityRange, BarterPost, PostStatus
from app.models.user import USER_PROFILES_COLLECTION
from app.services.firestore_service import FirestoreService, DESCENDING
from app.services.storage_service import StorageService, ImageUpload
from app.utils.profile_snapshot import apply_owner_snapshot, distinct_ids, owner_snapshot

# 소유자가 수정할 수 있는 필드. user_id / created_at / 작성자 사본 / image_url은 여기서 제외됩니다.
UPDATABLE_FIELDS = (
    'title', 'description', 'type', 'tags', 'preferred_exchange',
    'location', 'availability', 'status'
)

class PostService:
    """
    물물교환 게시글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    Firestore / Storage 클라이언트는 create_app에서 주입됩니다.
    """
    def __init__(self, store: FirestoreService, storage_service: StorageService):
        self.store = store
        self.storage = storage_service

    # --- 목록 조회 파이프라인 ---
    def get_filtered_posts(self, criteria: PostFilterCriteria) -> List[Dict[str, Any]]:
        """
        조건에 맞는 게시글 한 페이지를 반환합니다.

        1. Firestore 쿼리: status / user_id / location 등호 조건 + 태그(array-contains-any), created_at 내림차순
        2. 작성자 프로필을 한 번에 조회해 display_name / profile_image_url 갱신
        3. 검색어, 가용 날짜 조건을 메모리에서 적용
        4. 필터링된 결과 기준으로 페이지 자르기
        """
        if criteria.page is None or criteria.page < 0:
            raise ValidationError({"page": ["페이지 번호는 0 이상이어야 합니다."]})
        if criteria.size is None or criteria.size < 1:
            raise ValidationError({"size": ["페이지 크기는 1 이상이어야 합니다."]})

        tags = usable_tag_filter(criteria.tags)
        posts = self.store.query(
            BARTER_POSTS_COLLECTION,
            filters={
                'status': criteria.effective_status,
                'user_id': criteria.uploader_id or None,
                'location': criteria.location or None,
            },
            array_contains_any=('tags', tags) if tags else None,
            order_by='created_at',
            direction=DESCENDING,
            id_field='post_id'
        )

        profiles = self.store.get_many(USER_PROFILES_COLLECTION, distinct_ids(posts, 'user_id'))
        posts = apply_owner_snapshot(posts, profiles)

        posts = filter_by_search_term(posts, criteria.search_term)
        posts = filter_by_availability(posts, parse_availability_filter(criteria.availability))

        return paginate(posts, criteria.page, criteria.size)

    # --- 단건 조회 ---
    def _get_post_record(self, post_id: str) -> Dict[str, Any]:
        post = self.store.get(BARTER_POSTS_COLLECTION, post_id, id_field='post_id')
        if post is None:
            raise NotFoundError(f"게시글을 찾을 수 없습니다 (post_id: {post_id}).")
        return post

    def _load_owned_post(self, post_id: str, requester_id: str) -> Dict[str, Any]:
        post = self._get_post_record(post_id)
        if post.get('user_id') != requester_id:
            logging.warning(f"게시글 권한 없음 (post_id: {post_id}, requester: {requester_id})")
            raise AuthorizationError("게시글 작성자만 수정하거나 삭제할 수 있습니다.")
        return post

    def _with_current_owner(self, post: Dict[str, Any]) -> Dict[str, Any]:
        profiles = self.store.get_many(USER_PROFILES_COLLECTION, [post.get('user_id')])
        return apply_owner_snapshot([post], profiles)[0]

    def get_post(self, post_id: str) -> Dict[str, Any]:
        return self._with_current_owner(self._get_post_record(post_id))

    def get_post_for_edit(self, post_id: str, requester_id: str) -> Dict[str, Any]:
        """수정 화면용 조회. 작성자 본인만 가능합니다."""
        return self._with_current_owner(self._load_owned_post(post_id, requester_id))

    # --- 생성/수정/삭제 ---
    def _owner_fields(self, owner_id: str) -> Dict[str, Any]:
        display_name, profile_image_url = owner_snapshot(self.store.get(USER_PROFILES_COLLECTION, owner_id))
        return {'display_name': display_name, 'profile_image_url': profile_image_url}

    def create_post(self, owner_id: str, data: Dict[str, Any], image: Optional[ImageUpload] = None) -> Dict[str, Any]:
        """
        새 게시글을 생성합니다. 상태는 항상 open으로 시작합니다.

        :param owner_id: 인증된 작성자 uid (요청 본문의 값은 사용하지 않음)
        :param data: PostCreateSchema로 검증된 데이터
        :param image: 함께 업로드할 이미지 (선택)
        """
        image_url = self.storage.upload_image(image) if image else None

        post = BarterPost(
            post_id=self.store.new_id(BARTER_POSTS_COLLECTION),
            user_id=owner_id,
            title=data['title'],
            description=data['description'],
            type=data['type'],
            tags=list(data.get('tags') or []),
            preferred_exchange=data.get('preferred_exchange'),
            image_url=image_url,
            location=data.get('location'),
            availability=[AvailabilityRange.from_dict(r) for r in data.get('availability') or []],
            status=PostStatus.OPEN.value,
            **self._owner_fields(owner_id)
        )
        try:
            self.store.set(BARTER_POSTS_COLLECTION, post.post_id, post.to_dict())
        except UnavailableError:
            if image:
                self.storage.delete_image_quietly(image_url, f"post {post.post_id} (생성 실패)")
            raise

        logging.info(f"게시글 생성 완료 (post_id: {post.post_id}, user_id: {owner_id})")
        return post.to_dict()

    def update_post(self, post_id: str, requester_id: str, data: Dict[str, Any],
                    image: Optional[ImageUpload] = None, remove_image: bool = False) -> Dict[str, Any]:
        """
        전달된 필드만 부분 업데이트합니다.
        새 이미지가 오면 기존 이미지를 교체하고, remove_image이면 이미지를 제거합니다.
        기존 이미지 삭제는 문서 갱신 이후 best-effort로 수행됩니다.
        """
        post = self._load_owned_post(post_id, requester_id)
        old_image_url = post.get('image_url')

        fields = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}
        if image:
            fields['image_url'] = self.storage.upload_image(image)
        elif remove_image:
            fields['image_url'] = None
        fields.update(self._owner_fields(post['user_id']))

        try:
            self.store.update_fields(BARTER_POSTS_COLLECTION, post_id, fields)
        except (UnavailableError, NotFoundError):
            if image:
                self.storage.delete_image_quietly(fields['image_url'], f"post {post_id} (수정 실패)")
            raise

        if old_image_url and 'image_url' in fields and fields['image_url'] != old_image_url:
            self.storage.delete_image_quietly(old_image_url, f"post {post_id}")

        logging.info(f"게시글 수정 완료 (post_id: {post_id}, fields: {sorted(fields)})")
        post.update(fields)
        return post

    def delete_post(self, post_id: str, requester_id: str) -> None:
        post = self._load_owned_post(post_id, requester_id)
        self.store.delete(BARTER_POSTS_COLLECTION, post_id)
        logging.info(f"게시글 삭제 완료 (post_id: {post_id})")
        self.storage.delete_image_quietly(post.get('image_url'), f"post {post_id}")
