# app/utils/profile_snapshot.py
"""
게시글/리뷰/메시지에 복사해 두는 작성자 정보(display name, 프로필 이미지)를 다루는 헬퍼.

작성자 정보는 쓰기 시점의 사본이므로 프로필이 바뀌면 다음 쓰기(또는 조회 시 재해석) 전까지
이전 값이 남아 있을 수 있습니다. 이는 의도된 동작입니다.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

UNKNOWN_USER_NAME = "Unknown User"

def owner_snapshot(profile: Optional[Dict[str, Any]]) -> Tuple[str, Optional[str]]:
    """프로필 문서에서 (display_name, profile_image_url)을 뽑습니다. 프로필이 없으면 placeholder."""
    if not profile:
        return UNKNOWN_USER_NAME, None
    return profile.get('display_name') or UNKNOWN_USER_NAME, profile.get('profile_image_url')

def distinct_ids(records: Iterable[Dict[str, Any]], id_key: str) -> List[str]:
    """레코드에 등장하는 사용자 ID를 처음 등장한 순서대로 중복 없이 반환합니다."""
    return list(dict.fromkeys(r.get(id_key) for r in records if r.get(id_key)))

def apply_owner_snapshot(records: List[Dict[str, Any]],
                         profiles: Dict[str, Dict[str, Any]],
                         id_key: str = 'user_id',
                         name_key: str = 'display_name',
                         image_key: Optional[str] = 'profile_image_url') -> List[Dict[str, Any]]:
    """
    각 레코드의 작성자 정보를 profiles 맵({uid: 프로필})의 현재 값으로 다시 채운 사본 목록을 반환합니다.
    원본 레코드는 변경하지 않습니다.

    :param records: 게시글 등 작성자 ID를 가진 딕셔너리 목록
    :param profiles: 호출 단위로 한 번만 조회한 {uid: 프로필 문서} 맵
    :param id_key: 레코드에서 작성자 ID가 들어있는 키
    :param name_key: 표시 이름을 쓸 키
    :param image_key: 프로필 이미지를 쓸 키 (None이면 이미지는 건드리지 않음)
    """
    enriched = []
    for record in records:
        owner_id = record.get(id_key)
        profile = profiles.get(owner_id)
        if profile is None:
            logging.warning(f"작성자 프로필을 찾을 수 없어 기본 이름을 사용합니다 (uid: {owner_id}).")

        display_name, image_url = owner_snapshot(profile)
        updated = dict(record)
        updated[name_key] = display_name
        if image_key:
            updated[image_key] = image_url
        enriched.append(updated)
    return enriched
