"""DingTalk robot message models."""

from typing import Literal

from pydantic import BaseModel

DEFAULT_MSG_TYPE = "text"


class DingTalkText(BaseModel):
    content: str


class DingTalkMessage(BaseModel):
    """Plain text robot message: ``{"msgtype": "text", "text": {"content": ...}}``."""

    msgtype: Literal["text"] = DEFAULT_MSG_TYPE
    text: DingTalkText
