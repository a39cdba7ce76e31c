# app/api/posts/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, post_load, ValidationError, EXCLUDE

from app.models.post import PostType, PostStatus
from app.utils.datetime_utils import DateTimeUtils

POST_TYPES = [t.value for t in PostType]
POST_STATUSES = [s.value for s in PostStatus]

def _validate_iso_datetime(value):
    try:
        DateTimeUtils.parse_iso_datetime(value)
    except ValueError:
        raise ValidationError("ISO-8601 형식의 날짜/시간이어야 합니다.")

# --- 재사용을 위한 중첩 스키마 ---
class AvailabilityRangeSchema(Schema):
    """교환 가능 기간. start <= end 이어야 하며, 저장 시 UTC ISO 문자열로 정규화됩니다."""
    start = fields.Str(required=True, validate=_validate_iso_datetime)
    end = fields.Str(required=True, validate=_validate_iso_datetime)

    @validates_schema
    def validate_order(self, data, **kwargs):
        start = DateTimeUtils.parse_iso_datetime(data['start'])
        end = DateTimeUtils.parse_iso_datetime(data['end'])
        if start > end:
            raise ValidationError("start는 end보다 늦을 수 없습니다.", field_name="end")

    @post_load
    def normalize(self, data, **kwargs):
        return {
            'start': DateTimeUtils.to_iso_string(DateTimeUtils.parse_iso_datetime(data['start'])),
            'end': DateTimeUtils.to_iso_string(DateTimeUtils.parse_iso_datetime(data['end'])),
        }

# --- API 요청/응답 스키마 ---
class PostCreateSchema(Schema):
    """POST /api/posts 요청의 'post' 파트(또는 JSON 본문) 유효성을 검사합니다."""
    class Meta:
        unknown = EXCLUDE

    title = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    description = fields.Str(required=True, validate=validate.Length(min=1, max=5000))
    type = fields.Str(required=True, validate=validate.OneOf(POST_TYPES))
    tags = fields.List(fields.Str(validate=validate.Length(min=1, max=50)), load_default=list)
    preferred_exchange = fields.Str(allow_none=True, validate=validate.Length(max=500))
    location = fields.Str(allow_none=True, validate=validate.Length(max=200))
    availability = fields.List(fields.Nested(AvailabilityRangeSchema), load_default=list)

class PostUpdateSchema(PostCreateSchema):
    """
    PUT /api/posts/{post_id} 요청. 전달된 필드만 검사하고 반환합니다.
    빠진 필드에 기본값을 채우면 부분 수정이 기존 값을 덮어쓰므로 load_default를 두지 않습니다.
    """
    # 중첩 스키마(availability)에는 partial을 전파하지 않도록 최상위 필드 이름만 지정합니다.
    PARTIAL_FIELDS = ('title', 'description', 'type')

    tags = fields.List(fields.Str(validate=validate.Length(min=1, max=50)))
    availability = fields.List(fields.Nested(AvailabilityRangeSchema))
    status = fields.Str(validate=validate.OneOf(POST_STATUSES))

class PostListQuerySchema(Schema):
    """GET /api/posts 쿼리 파라미터. radius, urgency 등 알 수 없는 파라미터는 무시합니다."""
    class Meta:
        unknown = EXCLUDE

    uploader_id = fields.Str(data_key='uploaderId', load_default=None)
    search_term = fields.Str(data_key='searchTerm', load_default=None)
    location = fields.Str(load_default=None)
    availability = fields.Str(load_default=None)
    status = fields.Str(load_default=None, validate=validate.OneOf(POST_STATUSES))
    page = fields.Int(load_default=0, validate=validate.Range(min=0))
    size = fields.Int(load_default=None, validate=validate.Range(min=1))

class AvailabilityRangeResponseSchema(Schema):
    start = fields.Str()
    end = fields.Str()

class PostResponseSchema(Schema):
    """게시글 정보 응답을 위한 최종 JSON 형식을 정의합니다."""
    post_id = fields.Str(dump_only=True)
    user_id = fields.Str()
    title = fields.Str()
    description = fields.Str()
    type = fields.Str()
    tags = fields.List(fields.Str())
    preferred_exchange = fields.Str(allow_none=True)
    image_url = fields.Str(allow_none=True)
    location = fields.Str(allow_none=True)
    availability = fields.List(fields.Nested(AvailabilityRangeResponseSchema))
    status = fields.Str()
    created_at = fields.Str()
    display_name = fields.Str(allow_none=True)
    profile_image_url = fields.Str(allow_none=True)
