import os

# Database Configuration
# Uses default credentials for local Docker Compose setup
DB_URL = os.getenv("DATABASE_URL", "postgres://user:password@db:5432/crumbs_db")

# Application Metadata
PROJECT_NAME = "CRUMBS Business Management API"
VERSION = "1.0.0"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Identity provider (sessions + admin user management)
AUTH_BASE_URL = os.getenv("AUTH_BASE_URL", "http://auth:3000")
AUTH_TIMEOUT = float(os.getenv("AUTH_TIMEOUT", 10))

# AI suggestion provider
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
AI_TIMEOUT = float(os.getenv("AI_TIMEOUT", 60))

# Listing limits
PRODUCTION_HISTORY_LIMIT = int(os.getenv("PRODUCTION_HISTORY_LIMIT", 50)) # Newest N production logs shown
ADMIN_LIST_LIMIT = int(os.getenv("ADMIN_LIST_LIMIT", 100)) # Default page size for the user table
