# app/api/reviews/routes.py
from flask import Blueprint, request, jsonify, Response, current_app, g
from marshmallow import ValidationError

from app.api.reviews.schemas import ReviewCreateSchema, ReviewResponseSchema
from app.core.security import firebase_auth_required
from app.utils.request_utils import load_json_part

reviews_bp = Blueprint('reviews_bp', __name__)

def _required_arg(name: str) -> str:
    value = request.args.get(name)
    if not value:
        raise ValidationError({name: ["필수 쿼리 파라미터입니다."]})
    return value

@reviews_bp.route('', methods=['GET'])
def get_all_reviews():
    reviews = current_app.services['reviews'].get_all_reviews()
    return jsonify(ReviewResponseSchema(many=True).dump(reviews)), 200

@reviews_bp.route('/received', methods=['GET'])
def get_reviews_received():
    """GET /api/reviews/received?toUserId= : 특정 사용자가 받은 리뷰"""
    reviews = current_app.services['reviews'].get_reviews_received(_required_arg('toUserId'))
    return jsonify(ReviewResponseSchema(many=True).dump(reviews)), 200

@reviews_bp.route('/written', methods=['GET'])
def get_reviews_written():
    """GET /api/reviews/written?fromUserId= : 특정 사용자가 작성한 리뷰"""
    reviews = current_app.services['reviews'].get_reviews_written(_required_arg('fromUserId'))
    return jsonify(ReviewResponseSchema(many=True).dump(reviews)), 200

@reviews_bp.route('/post/<string:post_id>', methods=['GET'])
def get_reviews_for_post(post_id):
    reviews = current_app.services['reviews'].get_reviews_for_post(post_id)
    return jsonify(ReviewResponseSchema(many=True).dump(reviews)), 200

@reviews_bp.route('/<string:review_id>', methods=['GET'])
def get_review(review_id):
    review = current_app.services['reviews'].get_review(review_id)
    return jsonify(ReviewResponseSchema().dump(review)), 200

@reviews_bp.route('', methods=['POST'])
@firebase_auth_required()
def create_review():
    data = ReviewCreateSchema().load(load_json_part('review'))
    review = current_app.services['reviews'].create_review(g.user_id, data)
    return jsonify(ReviewResponseSchema().dump(review)), 201

@reviews_bp.route('/<string:review_id>', methods=['DELETE'])
@firebase_auth_required()
def delete_review(review_id):
    current_app.services['reviews'].delete_review(review_id, g.user_id)
    return Response(status=204)
