import os
from dotenv import load_dotenv

# Render Configuration
IS_RENDER = os.environ.get("RENDER", "") == "true"

# Only load the .env file if we're not on Render (i.e., we are in a local environment)
if not IS_RENDER:
    load_dotenv()


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# Flask Configuration
SECRET_KEY = os.getenv('SECRET_KEY', 'a_very_secret_key_that_should_be_changed')
CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

# Socket.IO Configuration
SOCKETIO_ASYNC_MODE = os.getenv('SOCKETIO_ASYNC_MODE', 'eventlet')
SOCKETIO_PING_TIMEOUT = int(os.getenv('SOCKETIO_PING_TIMEOUT', 60))
SOCKETIO_PING_INTERVAL = int(os.getenv('SOCKETIO_PING_INTERVAL', 25))

# Session Configuration
SESSION_CODE_LENGTH = int(os.getenv('SESSION_CODE_LENGTH', 6))
SESSION_GRACE_SECONDS = float(os.getenv('SESSION_GRACE_SECONDS', 60))
MAX_NAME_LENGTH = int(os.getenv('MAX_NAME_LENGTH', 20))

# OpenAI Configuration
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')
OPENAI_IMAGE_MODEL = os.getenv('OPENAI_IMAGE_MODEL', 'dall-e-3')
OPENAI_IMAGE_SIZE = os.getenv('OPENAI_IMAGE_SIZE', '1024x1024')
OPENAI_TTS_MODEL = os.getenv('OPENAI_TTS_MODEL', 'tts-1')
OPENAI_TTS_VOICE = os.getenv('OPENAI_TTS_VOICE', 'alloy')

# Word Category timings
WORD_SUBMISSION_SECONDS = int(os.getenv('WORD_SUBMISSION_SECONDS', 60))
WORD_REVEAL_SECONDS = int(os.getenv('WORD_REVEAL_SECONDS', 5))
WORD_VOTING_SECONDS = int(os.getenv('WORD_VOTING_SECONDS', 10))
WORD_CHALLENGE_RESULT_SECONDS = int(os.getenv('WORD_CHALLENGE_RESULT_SECONDS', 3))
WORD_CATEGORIES_PER_ROUND = int(os.getenv('WORD_CATEGORIES_PER_ROUND', 5))
WORD_POINTS_PER_WORD = int(os.getenv('WORD_POINTS_PER_WORD', 10))
WORD_KEEP_SCORES_BETWEEN_ROUNDS = _get_bool('WORD_KEEP_SCORES_BETWEEN_ROUNDS', True)

# AI game timings
DRAWING_SECONDS = int(os.getenv('DRAWING_SECONDS', 60))
ANSWERING_SECONDS = int(os.getenv('ANSWERING_SECONDS', 30))

# Server Configuration
PORT = int(os.getenv('PORT', 5000))
DEBUG = not IS_RENDER


def as_dict() -> dict:
    """Collect the upper-case settings of this module into a plain dict."""
    return {
        name: value for name, value in globals().items()
        if name.isupper()
    }
