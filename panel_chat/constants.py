"""Default configuration settings for the panel-chat package."""

from __future__ import annotations

# --- Inference Defaults ---
DEFAULT_OPENAI_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_MAX_TOKENS = 1000
DEFAULT_TIMEOUT = 120.0

# --- Server Defaults ---
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 61338

# --- User-facing Messages ---
MISSING_API_KEY_MESSAGE = "OpenAI API key is not configured. Please set it in your settings."
NO_RESPONSE_MESSAGE = "No response from API"
BUSY_MESSAGE = "A request is already in progress. Please wait for the current response."
EMPTY_QUESTION_MESSAGE = "Please enter a question or attach an image."
