import logging
import os
import random
import tempfile

import requests
from django.conf import settings
from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

IMAGE_SIZE = (800, 600)


class ExternalAPIError(Exception):
    """Raised when an upstream API cannot be reached or returns unusable data."""

    def __init__(self, source, reason=""):
        self.source = source
        self.reason = reason
        super().__init__(f"Could not fetch data from {source}" + (f": {reason}" if reason else ""))


class Config:
    SUMMARY_FILENAME = "summary.png"

    @property
    def cache_path(self) -> str:
        """Return absolute cache directory path (writable)."""
        path = os.path.abspath(settings.CACHE_DIR)
        os.makedirs(path, exist_ok=True)
        return path

config = Config()


def _get_json(url, source):
    try:
        resp = requests.get(url, timeout=settings.EXTERNAL_TIMEOUT)
    except requests.RequestException as e:
        raise ExternalAPIError(source, str(e)) from e
    if resp.status_code != 200:
        raise ExternalAPIError(source, f"HTTP {resp.status_code}")
    try:
        return resp.json()
    except ValueError as e:
        raise ExternalAPIError(source, "invalid JSON") from e


def fetch_countries():
    data = _get_json(settings.COUNTRIES_API_URL, "Countries API")
    if not isinstance(data, list):
        raise ExternalAPIError("Countries API", "expected a list of countries")
    return data


def fetch_exchange_rates():
    data = _get_json(settings.EXCHANGE_API_URL, "Exchange rates API")
    if not isinstance(data, dict) or data.get("result") != "success":
        raise ExternalAPIError("Exchange rates API", "result is not success")
    # API returns 'rates' mapping
    return data.get("rates") or {}


def make_multiplier():
    """Random GDP scale, drawn once per refresh from [1000, 2000)."""
    return random.uniform(1000, 2000)


def estimate_gdp(population, rate, multiplier):
    """
    Return (exchange_rate, estimated_gdp).

    Both are None when the rate is missing, zero or not a number.
    """
    try:
        rate = float(rate)
    except (TypeError, ValueError):
        return None, None
    if rate <= 0:
        return None, None
    return rate, round(population * multiplier / rate)


def get_summary_image_path():
    """Return full path to the summary image in the writable cache."""
    return os.path.join(config.cache_path, Config.SUMMARY_FILENAME)


def _load_fonts():
    try:
        return ImageFont.truetype("arial.ttf", 30), ImageFont.truetype("arial.ttf", 16)
    except OSError:
        try:
            return ImageFont.truetype("DejaVuSans-Bold.ttf", 30), ImageFont.truetype("DejaVuSans.ttf", 16)
        except OSError:
            return ImageFont.load_default(), ImageFont.load_default()


def format_gdp(value):
    if value is None:
        return "N/A"
    return f"${value:,.2f}"


def generate_summary_image(total_countries, top5, timestamp):
    """
    Generate a summary PNG showing total countries, top 5 GDP countries,
    and last refresh timestamp. Saves image to cache path.

    The file is written next to its final location and renamed into
    place, so a concurrent reader never gets a half-written PNG.
    """
    path = get_summary_image_path()

    img = Image.new("RGB", IMAGE_SIZE, color="white")
    draw = ImageDraw.Draw(img)
    font_title, font_body = _load_fonts()

    # Header
    draw.text((50, 30), "Countries Summary", fill="black", font=font_title)
    draw.text((50, 80), f"Total countries: {total_countries}", fill="black", font=font_body)
    draw.text((50, 110), f"Last refreshed at: {timestamp or 'N/A'}", fill="black", font=font_body)
    draw.text((50, 140), "Top 5 countries by GDP:", fill="black", font=font_body)

    y = 170
    if not top5:
        draw.text((50, y), "No GDP data available.", fill="gray", font=font_body)
    else:
        for rank, c in enumerate(top5, start=1):
            draw.text((50, y), f"{rank}. {c.name}: {format_gdp(c.estimated_gdp)}", fill="black", font=font_body)
            y += 30

    fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(path), suffix=".png.tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            img.save(fh, "PNG")
        os.replace(tmp_path, path)
    except Exception:
        os.unlink(tmp_path)
        raise

    logger.info("Summary image written to %s (%d countries)", path, total_countries)
    return path
