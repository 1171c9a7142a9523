"""Shared constants and literal types for the tutor Lambda."""

from typing import Literal

AWS_REGION = "ap-northeast-1"
LANGSMITH_PROJECT = "smartspeak-tutor"
MAX_MESSAGE_LENGTH = 2000
DEFAULT_TEMPERATURE = 0.8
DEFAULT_MAX_OUTPUT_TOKENS = 500
ALLOWED_METHODS = ["POST"]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Max-Age": "86400",
}

INVALID_JSON_ERROR = "Request body must be valid JSON"
INVALID_MESSAGE_ERROR = "Missing or invalid message field"
EMPTY_MESSAGE_ERROR = "Message cannot be empty"
MESSAGE_TOO_LONG_ERROR = f"Message too long (max {MAX_MESSAGE_LENGTH} characters)"
INVALID_HISTORY_ERROR = "History must be an array"
INVALID_HISTORY_ENTRY_ERROR = (
    "History entries must have a role of user, assistant or system and string content"
)
INVALID_TEXT_ERROR = "Message and history must be valid Unicode text"
SYSTEM_HISTORY_REJECTED_ERROR = "History must not contain system messages"
METHOD_NOT_ALLOWED_ERROR = "Method not allowed"
CONFIGURATION_ERROR = "API configuration error. Please contact support."
RATE_LIMITED_ERROR = "Too many requests. Please wait a moment and try again."
UPSTREAM_AUTH_ERROR = "Authentication error. Please contact support."
UPSTREAM_UNAVAILABLE_ERROR = "AI service temporarily unavailable"
EMPTY_REPLY_ERROR = "Failed to generate response. Please try again."
UNEXPECTED_ERROR = "An unexpected error occurred. Please try again."

TUTOR_SYSTEM_PROMPT = """You are SmartSpeak, a friendly and encouraging AI English tutor. Your role is to:

1. Help users improve their English through natural, engaging conversation
2. Gently correct grammar mistakes in a supportive way, showing the correct form
3. Explain new vocabulary in simple, clear terms
4. Ask follow-up questions to encourage practice and engagement
5. Adapt your language complexity to match the student's level
6. Provide practical examples when teaching new concepts
7. Be patient, positive, and celebrate progress
8. Keep responses conversational and educational (not too formal)

Remember: You're a supportive tutor, not just answering questions. Create a comfortable learning environment where students feel encouraged to practice and make mistakes."""

Role = Literal["user", "assistant", "system"]
ProviderName = Literal["groq", "gemini", "openai"]
AuthScheme = Literal["bearer", "query"]
HistorySystemPolicy = Literal["allow", "strip", "reject"]
