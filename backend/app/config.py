import os

COMMERCE_API_BASE_URL = os.getenv("COMMERCE_API_BASE_URL", "http://127.0.0.1:8080")
COMMERCE_API_BASE_PATH = os.getenv("COMMERCE_API_BASE_PATH", "/shopify")
# Token de service optionnel ; sinon fourni par requête (header Authorization)
COMMERCE_API_TOKEN = os.getenv("COMMERCE_API_TOKEN") or None
COMMERCE_API_TIMEOUT = float(os.getenv("COMMERCE_API_TIMEOUT", "10"))

LOG_LEVEL = os.getenv("RECEIVING_LOG_LEVEL", "INFO").upper()
