import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev")
    SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI", "sqlite:///guidely.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    ENV = os.getenv("ENV", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # Page sizes for the admin record lists
    RECORD_PAGE_SIZE = int(os.getenv("RECORD_PAGE_SIZE", "50"))
    USERS_PAGE_SIZE = int(os.getenv("USERS_PAGE_SIZE", "200"))
    ADMIN_INIT_EMAIL = os.getenv("ADMIN_INIT_EMAIL", "")
