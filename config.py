# config.py
from dotenv import load_dotenv
import os

load_dotenv(override=True)

# Result sizes for the product detail surfaces
SIMILAR_LIMIT = int(os.getenv("SIMILAR_LIMIT", "4"))
COMPATIBLE_LIMIT = int(os.getenv("COMPATIBLE_LIMIT", "8"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
OUTPUT_DIR = os.getenv("OUTPUT_DIR", "outputs")
