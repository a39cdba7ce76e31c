# app/api/users/routes.py
from flask import Blueprint, jsonify, Response, current_app, g

from app.api.users.schemas import UserProfileCreateSchema, UserProfileUpdateSchema, UserProfileResponseSchema
from app.core.security import firebase_auth_required
from app.utils.request_utils import load_json_part, read_image_part, flag_arg

users_bp = Blueprint('users_bp', __name__)

@users_bp.route('', methods=['GET'])
def get_all_profiles():
    profiles = current_app.services['users'].get_all_profiles()
    return jsonify(UserProfileResponseSchema(many=True).dump(profiles)), 200

@users_bp.route('/<string:user_id>', methods=['GET'])
def get_profile(user_id: str):
    """특정 사용자의 공개 프로필을 조회합니다."""
    profile = current_app.services['users'].get_profile(user_id)
    return jsonify(UserProfileResponseSchema().dump(profile)), 200

@users_bp.route('', methods=['POST'])
@firebase_auth_required()
def create_profile():
    """
    현재 로그인된 사용자의 프로필을 생성합니다.
    문서 ID와 이메일은 인증 토큰의 값을 사용합니다.
    """
    data = UserProfileCreateSchema().load(load_json_part('user'))
    profile = current_app.services['users'].create_profile(g.user_id, g.user_email, data, image=read_image_part())
    return jsonify(UserProfileResponseSchema().dump(profile)), 201

@users_bp.route('/<string:user_id>', methods=['PUT'])
@firebase_auth_required()
def update_profile(user_id: str):
    data = UserProfileUpdateSchema().load(load_json_part('user'), partial=True)
    profile = current_app.services['users'].update_profile(
        user_id, g.user_id, data,
        image=read_image_part(),
        remove_image=flag_arg('removeImage')
    )
    return jsonify(UserProfileResponseSchema().dump(profile)), 200

@users_bp.route('/<string:user_id>', methods=['DELETE'])
@firebase_auth_required()
def delete_profile(user_id: str):
    current_app.services['users'].delete_profile(user_id, g.user_id)
    return Response(status=204)
