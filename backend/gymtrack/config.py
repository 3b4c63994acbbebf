import os
from dotenv import load_dotenv

load_dotenv(override=False)

SQLALCHEMY_DATABASE_URL = os.getenv("SQLALCHEMY_DATABASE_URL", "sqlite:///./gymtrack.db")

# Uploaded exercise images are written below STATIC_DIR and served under /static
STATIC_DIR = os.getenv("STATIC_DIR", "./static")
IMAGE_DIR = os.getenv("IMAGE_DIR", os.path.join(STATIC_DIR, "images"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
