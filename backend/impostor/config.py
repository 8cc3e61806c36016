import os


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, str(default)))
    except ValueError:
        return default


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "0") == "1"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Room
    JOIN_CODE_LENGTH = 6
    MAX_PARTICIPANTS = _int_env("MAX_PARTICIPANTS", 30)
    MIN_ONLINE_PARTICIPANTS = _int_env("MIN_ONLINE_PARTICIPANTS", 3)
    MIN_OFFLINE_PARTICIPANTS = _int_env("MIN_OFFLINE_PARTICIPANTS", 2)

    # Input bounds
    MAX_NAME_LEN = 50
    MAX_WORD_LEN = 100
    MAX_WORDS = 50
    MAX_IMPORT_WORD_LEN = 50
    MAX_CONTENT_LENGTH = _int_env("MAX_CONTENT_LENGTH", 256 * 1024)

    # Rate limiting: requests per window, keyed by (action, participant)
    # or by (action, address) for room-less actions.
    RATE_LIMIT_WINDOW_SEC = _int_env("RATE_LIMIT_WINDOW_SEC", 60)
    RATE_LIMITS = {
        "create_room": 10,
        "join_room": 20,
        "find_room": 30,
        "register_participant": 20,
        "start_round": 10,
        "new_round": 10,
        "update_room": 30,
        "add_word": 60,
        "remove_word": 60,
        "delete_room": 5,
        "leave_room": 10,
        "get_my_role": 120,
        "get_players": 120,
        "get_room": 120,
        "subscribe": 30,
    }
    RATE_LIMIT_DEFAULT = _int_env("RATE_LIMIT_DEFAULT", 30)
