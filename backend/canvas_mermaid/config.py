import os
from dotenv import load_dotenv

from canvas_mermaid.compiler.types import ConversionSettings

# Load .env from project root
load_dotenv()


def _flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Conversion defaults
FLOWCHART_DIRECTION = os.getenv("FLOWCHART_DIRECTION", "TB").upper()
ENABLE_MERMAID_STYLING = _flag("ENABLE_MERMAID_STYLING", True)
ENABLE_INTERNAL_LINKS = _flag("ENABLE_INTERNAL_LINKS", True)

# Vault holding the canvases and the Markdown documents that embed them
VAULT_ROOT = os.getenv("VAULT_ROOT", ".")

# Run log
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./canvas_mermaid.db")

# Server
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]


def default_settings() -> ConversionSettings:
    """Conversion settings built from the environment defaults."""
    return ConversionSettings(
        direction=FLOWCHART_DIRECTION,
        enable_styling=ENABLE_MERMAID_STYLING,
        enable_internal_links=ENABLE_INTERNAL_LINKS,
    )
