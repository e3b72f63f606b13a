from pydantic import BaseModel, Field
from typing import Optional

class ConversationCreate(BaseModel):
    shop_id: Optional[str] = Field(None, alias="shopId")
    user_id: Optional[str] = Field(None, alias="userId")

    class Config:
        populate_by_name = True

class TextMessageCreate(BaseModel):
    conversation_id: Optional[str] = Field(None, alias="conversationId")
    sender_type: Optional[str] = Field(None, alias="senderType", description="shop or customer")
    sender_id: Optional[str] = Field(None, alias="senderId")
    message_text: Optional[str] = Field(None, alias="messageText")

    class Config:
        populate_by_name = True

class MarkReadRequest(BaseModel):
    conversation_id: Optional[str] = Field(None, alias="conversationId")
    reader_type: Optional[str] = Field(None, alias="readerType", description="shop or customer")

    class Config:
        populate_by_name = True
