import os
from dotenv import load_dotenv

# Only load the .env file if we're not on Render (i.e., we are in a local environment)
if os.environ.get("RENDER") != "true":
    load_dotenv()

# Flask Configuration
SECRET_KEY = os.getenv('SECRET_KEY', 'a_very_secret_key_that_should_be_changed')
CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

# Database Configuration (game results and leaderboard only, rooms stay in memory)
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///game.db')
SQL_DEBUG = os.getenv('SQL_DEBUG', 'false').lower() == 'true'

# Socket.IO Configuration
SOCKETIO_ASYNC_MODE = os.getenv('SOCKETIO_ASYNC_MODE', 'eventlet')
PING_TIMEOUT = int(os.getenv('PING_TIMEOUT', 60))
PING_INTERVAL = int(os.getenv('PING_INTERVAL', 25))

# Server Configuration
PORT = int(os.getenv('PORT', 3001))
DEBUG = os.environ.get('RENDER', '') != 'true'

# Render Configuration
IS_RENDER = os.environ.get("RENDER", "") == "true"
