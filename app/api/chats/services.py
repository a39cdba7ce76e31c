# app/api/chats/services.py
import logging
from dataclasses import asdict
from typing import Optional, Dict, Any, List, Tuple

from marshmallow import ValidationError

from app.core.exceptions import NotFoundError, AuthorizationError
from app.models.chat import (
    CHATS_COLLECTION, MESSAGES_SUBCOLLECTION, ChatConversation, ChatMessage, ChatType, LastMessage
)
from app.models.user import USER_PROFILES_COLLECTION
from app.services.firestore_service import FirestoreService, ASCENDING, DESCENDING
from app.utils.profile_snapshot import owner_snapshot

class ChatService:
    """
    채팅방과 메시지 관련 비즈니스 로직을 담당하는 서비스 클래스.
    메시지는 'chats/{chat_id}/messages' 서브컬렉션에 추가만 됩니다.
    실시간 전달은 클라이언트가 Firestore 변경 알림을 직접 구독하는 방식에 맡깁니다.
    """
    def __init__(self, store: FirestoreService):
        self.store = store

    def create_chat(self, creator_id: str, participants: List[str], chat_type: str,
                    name: Optional[str] = None) -> Tuple[Dict[str, Any], bool]:
        """
        채팅방을 생성합니다.

        - direct: 서로 다른 두 명. ID는 정렬된 uid를 '_'로 이은 값이며, 이미 있으면 기존 방을 반환합니다.
        - group: Firestore가 발급한 ID, 이름 필수, 참여자 1명 이상.

        :return: (채팅방, 새로 생성되었는지 여부)
        """
        unique_participants = list(dict.fromkeys(p for p in (participants or []) if p))

        if chat_type == ChatType.DIRECT.value:
            if len(participants or []) != 2 or len(unique_participants) != 2:
                raise ValidationError({"participants": ["1:1 채팅은 서로 다른 두 명의 참여자가 필요합니다."]})
        elif chat_type == ChatType.GROUP.value:
            if not name or not name.strip():
                raise ValidationError({"name": ["그룹 채팅은 이름이 필요합니다."]})
            if not unique_participants:
                raise ValidationError({"participants": ["참여자가 한 명 이상 필요합니다."]})
        else:
            raise ValidationError({"type": [f"지원하지 않는 채팅 유형입니다: {chat_type}"]})

        if creator_id not in unique_participants:
            raise AuthorizationError("자신이 참여하지 않는 채팅방은 만들 수 없습니다.")

        if chat_type == ChatType.DIRECT.value:
            chat_id = ChatConversation.direct_chat_id(unique_participants)
            existing = self.store.get(CHATS_COLLECTION, chat_id, id_field='chat_id')
            if existing is not None:
                logging.info(f"기존 1:1 채팅방 반환 (chat_id: {chat_id})")
                return existing, False
            chat = ChatConversation(chat_id=chat_id, participants=sorted(unique_participants),
                                    type=chat_type)
        else:
            chat = ChatConversation(chat_id=self.store.new_id(CHATS_COLLECTION),
                                    participants=unique_participants, type=chat_type, name=name.strip())

        self.store.set(CHATS_COLLECTION, chat.chat_id, chat.to_dict())
        logging.info(f"채팅방 생성 완료 (chat_id: {chat.chat_id}, type: {chat_type})")
        return chat.to_dict(), True

    def get_chat(self, chat_id: str, requester_id: str) -> Dict[str, Any]:
        """채팅방을 조회합니다. 참여자만 접근할 수 있습니다."""
        chat = self.store.get(CHATS_COLLECTION, chat_id, id_field='chat_id')
        if chat is None:
            raise NotFoundError(f"채팅방을 찾을 수 없습니다 (chat_id: {chat_id}).")
        if requester_id not in (chat.get('participants') or []):
            logging.warning(f"채팅방 접근 권한 없음 (chat_id: {chat_id}, requester: {requester_id})")
            raise AuthorizationError("채팅방 참여자만 접근할 수 있습니다.")
        return chat

    def get_chats_for_user(self, user_id: str, requester_id: str) -> List[Dict[str, Any]]:
        if user_id != requester_id:
            raise AuthorizationError("본인의 채팅 목록만 조회할 수 있습니다.")
        return self.store.query(CHATS_COLLECTION, array_contains=('participants', user_id),
                                order_by='updated_at', direction=DESCENDING, id_field='chat_id')

    def add_message(self, chat_id: str, sender_id: str, text: str) -> Dict[str, Any]:
        """
        메시지를 추가하고 채팅방의 last_message / updated_at을 갱신합니다.
        보낸 사람의 표시 이름과 프로필 이미지는 전송 시점의 값이 복사됩니다.
        """
        if not text or not text.strip():
            raise ValidationError({"text": ["메시지 내용이 비어 있습니다."]})

        self.get_chat(chat_id, sender_id)

        display_name, profile_image_url = owner_snapshot(self.store.get(USER_PROFILES_COLLECTION, sender_id))
        message = ChatMessage(
            chat_id=chat_id,
            sender_id=sender_id,
            text=text,
            sender_display_name=display_name,
            sender_profile_image_url=profile_image_url,
        )
        message_id = self.store.add(CHATS_COLLECTION, chat_id, MESSAGES_SUBCOLLECTION, message.to_dict())

        last_message = LastMessage(sender_id=sender_id, text=text, created_at=message.created_at)
        self.store.update_fields(CHATS_COLLECTION, chat_id, {
            'last_message': asdict(last_message),
            'updated_at': message.created_at,
        })
        return {**message.to_dict(), 'message_id': message_id}

    def get_messages(self, chat_id: str, requester_id: str) -> List[Dict[str, Any]]:
        """메시지를 오래된 순서대로 반환합니다."""
        self.get_chat(chat_id, requester_id)
        return self.store.list_subcollection(CHATS_COLLECTION, chat_id, MESSAGES_SUBCOLLECTION,
                                             order_by='created_at', direction=ASCENDING, id_field='message_id')

    def delete_chat(self, chat_id: str, requester_id: str) -> None:
        """메시지 서브컬렉션을 먼저 모두 지운 뒤 채팅방 문서를 삭제합니다."""
        self.get_chat(chat_id, requester_id)
        deleted_count = self.store.delete_subcollection(CHATS_COLLECTION, chat_id, MESSAGES_SUBCOLLECTION)
        self.store.delete(CHATS_COLLECTION, chat_id)
        logging.info(f"채팅방 삭제 완료 (chat_id: {chat_id}, messages: {deleted_count})")
