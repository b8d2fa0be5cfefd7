from enum import Enum


class ChatMessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
