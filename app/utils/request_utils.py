# app/utils/request_utils.py
"""
multipart/form-data 요청(JSON 파트 + 이미지 파일)과 일반 JSON 요청을 같은 방식으로 읽기 위한 헬퍼.

클라이언트는 게시글/프로필을 이미지와 함께 보낼 때
  - 'post' 또는 'user' 파트: JSON 문자열 (폼 필드 또는 application/json 파일 파트)
  - 'image' 파트: 이미지 파일
로 구성된 multipart 요청을 보냅니다. 이미지가 없으면 JSON 본문만 보내도 됩니다.
"""

import json
from typing import Any, Dict, Optional

from flask import request
from marshmallow import ValidationError

from app.services.storage_service import ImageUpload

def _is_multipart() -> bool:
    return request.mimetype == 'multipart/form-data'

def load_json_part(part_name: str) -> Dict[str, Any]:
    """
    multipart 요청이면 part_name 파트의 JSON을, 아니면 요청 본문 JSON을 딕셔너리로 반환합니다.
    JSON이 없거나 형식이 잘못되면 ValidationError가 발생합니다.
    """
    if _is_multipart():
        raw = request.form.get(part_name)
        if raw is None and part_name in request.files:
            raw = request.files[part_name].read().decode('utf-8')
        if raw is None:
            raise ValidationError({part_name: ["요청에 JSON 파트가 없습니다."]})
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise ValidationError({part_name: ["JSON 형식이 올바르지 않습니다."]}) from e
    else:
        data = request.get_json(silent=True)

    if not isinstance(data, dict):
        raise ValidationError({"_schema": ["요청 본문이 비어있거나 JSON 객체가 아닙니다."]})
    return data

def read_image_part(part_name: str = 'image') -> Optional[ImageUpload]:
    """multipart 요청의 이미지 파일을 읽습니다. 파일이 없으면 None."""
    if not _is_multipart():
        return None
    file = request.files.get(part_name)
    if file is None or not file.filename:
        return None
    return ImageUpload(data=file.read(), filename=file.filename, content_type=file.mimetype)

def flag_arg(name: str) -> bool:
    """'true'/'1'/'yes' 형태의 쿼리 파라미터 또는 폼 필드를 bool로 읽습니다."""
    value = request.args.get(name)
    if value is None and _is_multipart():
        value = request.form.get(name)
    return str(value).lower() in ('true', '1', 'yes') if value is not None else False
