"""Provider registry."""

from .constants import ProviderName
from .providers.base import ProviderConfig
from .providers.chat_completions import (
    build_chat_completions_payload,
    extract_chat_completions_model,
    extract_chat_completions_reply,
    extract_chat_completions_usage,
)
from .providers.gemini import (
    build_generate_content_payload,
    extract_generate_content_model,
    extract_generate_content_reply,
    extract_generate_content_usage,
)

PROVIDER_CONFIGS: dict[ProviderName, ProviderConfig] = {
    "groq": ProviderConfig(
        name="groq",
        endpoint="https://api.groq.com/openai/v1/chat/completions",
        default_model="llama-3.3-70b-versatile",
        api_key_env_var="GROQ_API_KEY",
        auth_scheme="bearer",
        auth_param="Authorization",
        build_payload=build_chat_completions_payload,
        extract_reply=extract_chat_completions_reply,
        extract_model=extract_chat_completions_model,
        extract_usage=extract_chat_completions_usage,
        extra_params={"top_p": 0.95},
    ),
    "openai": ProviderConfig(
        name="openai",
        endpoint="https://api.openai.com/v1/chat/completions",
        default_model="gpt-4o-mini",
        api_key_env_var="OPENAI_API_KEY",
        auth_scheme="bearer",
        auth_param="Authorization",
        build_payload=build_chat_completions_payload,
        extract_reply=extract_chat_completions_reply,
        extract_model=extract_chat_completions_model,
        extract_usage=extract_chat_completions_usage,
    ),
    "gemini": ProviderConfig(
        name="gemini",
        endpoint=(
            "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
        ),
        default_model="gemini-1.5-flash",
        api_key_env_var="GEMINI_API_KEY",
        auth_scheme="query",
        auth_param="key",
        build_payload=build_generate_content_payload,
        extract_reply=extract_generate_content_reply,
        extract_model=extract_generate_content_model,
        extract_usage=extract_generate_content_usage,
    ),
}
