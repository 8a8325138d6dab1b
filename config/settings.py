import os
from dotenv import load_dotenv

from utils.constants import GAME_CONFIG

# Only load the .env file if we're not on Render (i.e., we are in a local environment)
if os.environ.get("RENDER") != "true":
    load_dotenv()

# Flask Configuration
SECRET_KEY = os.getenv('SECRET_KEY', 'a_very_secret_key_that_should_be_changed')
CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

# Server Configuration
PORT = int(os.getenv('PORT', 5000))
DEBUG = os.getenv('FLASK_ENV', 'production') == 'development'
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
SOCKETIO_ASYNC_MODE = os.getenv('SOCKETIO_ASYNC_MODE', 'eventlet')

# Game Configuration
DISCUSSION_SECONDS = int(os.getenv('DISCUSSION_SECONDS', GAME_CONFIG['DISCUSSION_SECONDS']))
FAKER_ESCAPE_POINTS = int(os.getenv('FAKER_ESCAPE_POINTS', GAME_CONFIG['FAKER_ESCAPE_POINTS']))
CATCH_POINTS = int(os.getenv('CATCH_POINTS', GAME_CONFIG['CATCH_POINTS']))
MIN_PLAYERS = int(os.getenv('MIN_PLAYERS', GAME_CONFIG['MIN_PLAYERS']))
DECOY_COUNT = int(os.getenv('DECOY_COUNT', GAME_CONFIG['DECOY_COUNT']))
MAX_NAME_LENGTH = int(os.getenv('MAX_NAME_LENGTH', GAME_CONFIG['MAX_NAME_LENGTH']))
MAX_WORD_LENGTH = int(os.getenv('MAX_WORD_LENGTH', GAME_CONFIG['MAX_WORD_LENGTH']))
MAX_TOPIC_LENGTH = int(os.getenv('MAX_TOPIC_LENGTH', GAME_CONFIG['MAX_TOPIC_LENGTH']))

# Lobby Configuration
LOBBY_CODE_LENGTH = int(os.getenv('LOBBY_CODE_LENGTH', GAME_CONFIG['LOBBY_CODE_LENGTH']))
MAX_CODE_ATTEMPTS = int(os.getenv('MAX_CODE_ATTEMPTS', GAME_CONFIG['MAX_CODE_ATTEMPTS']))
LOBBY_IDLE_MINUTES = int(os.getenv('LOBBY_IDLE_MINUTES', GAME_CONFIG['LOBBY_IDLE_MINUTES']))

# Render Configuration
IS_RENDER = os.environ.get("RENDER", "") == "true"
