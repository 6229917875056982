# insights/config.py
import os

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
LLM_MODEL = os.getenv("LLM_MODEL", "gemini-3-flash-preview")

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")  # 'local' or 's3'
DATA_DIR = os.getenv("DATA_DIR", "data")
S3_BUCKET = os.getenv("S3_BUCKET", "conect-insights-data")
AWS_REGION = os.getenv("AWS_REGION", "sa-east-1")

CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")

# Seed account created when the users collection is empty
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@conect.local")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
