# dronegpt/constants/model_api.py

class ModelAPIConstants:
    """Defaults for the chat-completion endpoint."""

    DEFAULT_URL = "https://api.openai.com/v1/chat/completions"
    DEFAULT_AGENT_MODEL = "gpt-4-vision-preview"
    DEFAULT_CHAT_MODEL = "gpt-3.5-turbo"
    DEFAULT_TIMEOUT_S = 30.0
    DEFAULT_MAX_TOKENS = 512

    # Status codes worth another round on the next loop iteration
    TRANSIENT_STATUS_CODES = (408, 429, 500, 502, 503, 504)

    API_KEY_ENV = "OPENAI_API_KEY"
