"""Shared Jinja2 templates."""

from pathlib import Path

from fastapi.templating import Jinja2Templates

# Templates directory
BASE_DIR = Path(__file__).resolve().parent.parent
templates = Jinja2Templates(directory=BASE_DIR / "templates")
