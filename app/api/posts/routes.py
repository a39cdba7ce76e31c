# app/api/posts/routes.py
from flask import Blueprint, request, jsonify, current_app, Response, g

from app.api.posts.filtering import PostFilterCriteria
from app.api.posts.schemas import PostCreateSchema, PostUpdateSchema, PostListQuerySchema, PostResponseSchema
from app.core.security import firebase_auth_required
from app.utils.request_utils import load_json_part, read_image_part, flag_arg

posts_bp = Blueprint('posts_bp', __name__)

def _requested_tags():
    """skillCategory / tags 쿼리 파라미터(반복 또는 쉼표 구분)를 하나의 태그 목록으로 합칩니다."""
    raw_values = request.args.getlist('skillCategory') + request.args.getlist('tags')
    tags = [tag.strip() for value in raw_values for tag in value.split(',')]
    return [tag for tag in tags if tag] or None

@posts_bp.route('', methods=['GET'])
def get_posts():
    """조건에 맞는 게시글 목록을 페이지 단위로 조회합니다. (인증 불필요)"""
    query = PostListQuerySchema().load(request.args.to_dict())

    size = query['size'] or current_app.config.get('POSTS_DEFAULT_PAGE_SIZE', 10)
    size = min(size, current_app.config.get('POSTS_MAX_PAGE_SIZE', 100))

    criteria = PostFilterCriteria(
        uploader_id=query['uploader_id'],
        search_term=query['search_term'],
        tags=_requested_tags(),
        location=query['location'],
        availability=query['availability'],
        status=query['status'],
        page=query['page'],
        size=size,
    )
    posts = current_app.services['posts'].get_filtered_posts(criteria)
    return jsonify(PostResponseSchema(many=True).dump(posts)), 200

@posts_bp.route('/<string:post_id>', methods=['GET'])
def get_post(post_id):
    post = current_app.services['posts'].get_post(post_id)
    return jsonify(PostResponseSchema().dump(post)), 200

@posts_bp.route('/<string:post_id>/edit', methods=['GET'])
@firebase_auth_required()
def get_post_for_edit(post_id):
    post = current_app.services['posts'].get_post_for_edit(post_id, g.user_id)
    return jsonify(PostResponseSchema().dump(post)), 200

@posts_bp.route('', methods=['POST'])
@firebase_auth_required()
def create_post():
    """
    게시글을 생성합니다.
    multipart 요청: 'post' 파트(JSON) + 선택적 'image' 파일 / 일반 요청: JSON 본문
    """
    post_data = PostCreateSchema().load(load_json_part('post'))
    new_post = current_app.services['posts'].create_post(g.user_id, post_data, image=read_image_part())
    return jsonify(PostResponseSchema().dump(new_post)), 201

@posts_bp.route('/<string:post_id>', methods=['PUT'])
@firebase_auth_required()
def update_post(post_id):
    """게시글을 수정합니다. ?removeImage=true 이면 기존 이미지를 제거합니다."""
    post_data = PostUpdateSchema().load(load_json_part('post'), partial=PostUpdateSchema.PARTIAL_FIELDS)
    updated_post = current_app.services['posts'].update_post(
        post_id, g.user_id, post_data,
        image=read_image_part(),
        remove_image=flag_arg('removeImage')
    )
    return jsonify(PostResponseSchema().dump(updated_post)), 200

@posts_bp.route('/<string:post_id>', methods=['DELETE'])
@firebase_auth_required()
def delete_post(post_id):
    current_app.services['posts'].delete_post(post_id, g.user_id)
    return Response(status=204)
