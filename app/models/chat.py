# app/models/chat.py
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, List, Dict, Any

from app.utils.datetime_utils import DateTimeUtils

CHATS_COLLECTION = "chats"
MESSAGES_SUBCOLLECTION = "messages"

class ChatType(Enum):
    DIRECT = "direct"
    GROUP = "group"

@dataclass
class LastMessage:
    """대화 목록에 보여줄 마지막 메시지 요약."""
    sender_id: str
    text: str
    created_at: str

@dataclass
class ChatConversation:
    """
    Firestore 'chats' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    1:1 대화(direct)의 chat_id는 참여자 uid를 정렬해 '_'로 이은 값입니다.
    """
    chat_id: str
    participants: List[str]
    type: str
    name: Optional[str] = None
    created_at: str = field(default_factory=DateTimeUtils.now_iso)
    updated_at: Optional[str] = None
    last_message: Optional[LastMessage] = None

    def __post_init__(self):
        if self.updated_at is None:
            self.updated_at = self.created_at

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def direct_chat_id(participants: List[str]) -> str:
        return "_".join(sorted(participants))

@dataclass
class ChatMessage:
    """
    'chats/{chat_id}/messages' 서브컬렉션의 문서 구조.
    message_id 는 Firestore가 생성하는 문서 ID이므로 문서 본문에는 저장하지 않습니다.
    """
    chat_id: str
    sender_id: str
    text: str
    created_at: str = field(default_factory=DateTimeUtils.now_iso)
    sender_display_name: Optional[str] = None
    sender_profile_image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
