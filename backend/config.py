import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    REDIS_URL = os.environ.get('REDIS_URL') or 'redis://localhost:6379/0'
    # Outgoing webhook auth and channel/admin lists (comma separated)
    OUTGOING_WEBHOOK_TOKEN = os.environ.get('OUTGOING_WEBHOOK_TOKEN')
    CHANNEL_BLACKLIST = os.environ.get('CHANNEL_BLACKLIST', '')
    ADMIN_USERS = os.environ.get('ADMIN_USERS', '')
    # Reply envelope identity
    BOT_USERNAME = os.environ.get('BOT_USERNAME')
    BOT_ICON = os.environ.get('BOT_ICON')
    # External collaborators
    SLACK_API_TOKEN = os.environ.get('SLACK_API_TOKEN')
    QUESTION_API_URL = os.environ.get('QUESTION_API_URL') or 'http://jservice.io/api/random?count=1'
    QUESTION_FETCH_ATTEMPTS = int(os.environ.get('QUESTION_FETCH_ATTEMPTS', '5'))
    HTTP_TIMEOUT_SEC = int(os.environ.get('HTTP_TIMEOUT_SEC', '10'))
    # Round tuning
    SECONDS_TO_ANSWER = int(os.environ.get('SECONDS_TO_ANSWER', '30'))
    SIMILARITY_THRESHOLD = float(os.environ.get('SIMILARITY_THRESHOLD', '0.9'))
