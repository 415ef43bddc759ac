"""Runtime configuration for OmniReport.

Every value can be overridden through the environment; the defaults match the
public Tavily and OpenRouter endpoints.
"""

from __future__ import annotations

import os
from pathlib import Path

LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")

APP_TITLE = "OmniReport"
# OpenRouter attributes requests to the calling application by these headers
APP_REFERER = os.environ.get("OMNIREPORT_REFERER", "https://omnireport.local")

# Tavily search
TAVILY_API_URL = os.environ.get("TAVILY_API_URL", "https://api.tavily.com/search")
TAVILY_MAX_RESULTS = int(os.environ.get("TAVILY_MAX_RESULTS", "10"))
TAVILY_SEARCH_DEPTH = "advanced"
TAVILY_TOPIC = os.environ.get("TAVILY_TOPIC", "general")

# OpenRouter chat completions
OPENROUTER_BASE_URL = os.environ.get("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
GENERATION_TEMPERATURE = float(os.environ.get("GENERATION_TEMPERATURE", "0.7"))
# Large enough for multi-paragraph sections
GENERATION_MAX_TOKENS = int(os.environ.get("GENERATION_MAX_TOKENS", "4000"))

# Pause between sections to keep the request rate polite
SECTION_DELAY_SECONDS = float(os.environ.get("SECTION_DELAY_SECONDS", "0.8"))

CREDENTIALS_FILE = Path(
    os.environ.get("OMNIREPORT_CREDENTIALS_FILE", "~/.omnireport/credentials.json")
).expanduser()
REPORTS_DIR = Path(os.environ.get("OMNIREPORT_REPORTS_DIR", "reports"))

# Optional TTF/TTC with CJK glyphs for PDF export
PDF_FONT_PATH = os.environ.get("OMNIREPORT_PDF_FONT", "")
PDF_FONT_CANDIDATES = [
    "C:/Windows/Fonts/simhei.ttf",
    "C:/Windows/Fonts/msyh.ttc",
    "/usr/share/fonts/truetype/droid/DroidSansFallbackFull.ttf",
    "/usr/share/fonts/truetype/wqy/wqy-microhei.ttc",
    "/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc",
    "/System/Library/Fonts/STHeiti Light.ttc",
]

DEFAULT_MODELS: list[tuple[str, str]] = [
    ("google/gemini-2.0-flash-001", "Gemini 2.0 Flash (推荐)"),
    ("google/gemini-pro-1.5", "Gemini Pro 1.5"),
    ("anthropic/claude-3.5-sonnet", "Claude 3.5 Sonnet"),
    ("openai/gpt-4o", "GPT-4o"),
]
DEFAULT_MODEL = os.environ.get("OMNIREPORT_DEFAULT_MODEL", DEFAULT_MODELS[0][0])
