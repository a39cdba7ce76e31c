# app/api/reviews/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

from app.models.review import MIN_RATING, MAX_RATING

class ReviewCreateSchema(Schema):
    """POST /api/reviews 요청 본문의 유효성을 검사합니다."""
    class Meta:
        unknown = EXCLUDE

    rating = fields.Int(required=True, strict=True, validate=validate.Range(min=MIN_RATING, max=MAX_RATING))
    to_user_id = fields.Str(required=True, validate=validate.Length(min=1))
    comment = fields.Str(allow_none=True, validate=validate.Length(max=2000))
    barter_post_id = fields.Str(allow_none=True)
    # 작성자는 항상 인증 토큰으로 결정됩니다. 값이 오면 토큰과 일치하는지만 확인합니다.
    from_user_id = fields.Str(allow_none=True)

class ReviewUserSchema(Schema):
    user_id = fields.Str()
    display_name = fields.Str(allow_none=True)

class ReviewResponseSchema(Schema):
    review_id = fields.Str(dump_only=True)
    rating = fields.Int()
    comment = fields.Str(allow_none=True)
    from_user_id = fields.Str()
    from_user = fields.Nested(ReviewUserSchema)
    to_user_id = fields.Str()
    barter_post_id = fields.Str(allow_none=True)
    created_at = fields.Str()
