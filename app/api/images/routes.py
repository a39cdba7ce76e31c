# app/api/images/routes.py

import logging
from flask import jsonify, Blueprint, current_app, g
from marshmallow import ValidationError

from app.core.security import firebase_auth_required
from app.utils.request_utils import read_image_part

# 이미지 단독 업로드 블루프린트. '/api/images' 접두사로 등록됩니다.
images_bp = Blueprint('images_bp', __name__)

@images_bp.route('/upload', methods=['POST'])
@firebase_auth_required()
def upload_image():
    """
    multipart 'image' 파트의 파일을 Storage에 올리고 공개 URL을 반환합니다.
    게시글/프로필 이미지는 각 API의 'image' 파트로만 저장되며, 여기서 받은 URL을 본문에 넣어도 무시됩니다.
    """
    image = read_image_part('image')
    if image is None:
        raise ValidationError({"image": ["업로드할 이미지 파일이 필요합니다."]})

    image_url = current_app.services['storage'].upload_image(image)
    logging.info(f"이미지 업로드 (user_id: {g.user_id}, file: {image.filename})")
    return jsonify({"image_url": image_url}), 201
