import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Snapshot persistence: 'file' writes a JSON document, 'sql' keeps it in a single table row
    SNAPSHOT_BACKEND = os.environ.get('SNAPSHOT_BACKEND', 'file')
    SNAPSHOT_PATH = os.environ.get('SNAPSHOT_PATH', './server-db.json')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///lobby.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = int(os.environ.get('BCRYPT_LOG_ROUNDS', '12'))
    # SHA-256 prehash so passwords over bcrypt's 72-byte limit still hash
    BCRYPT_HANDLE_LONG_PASSWORDS = True
    # Length of generated room codes
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    PORT = int(os.environ.get('PORT', '8787'))
