"""
Image generation client and local image storage

The generator asks the OpenAI images API for one square image for a
prompt and downloads it. The store writes it under the public image
directory with one file per calendar date.
"""

import os
import logging
from datetime import date

import requests

logger = logging.getLogger(__name__)

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_IMAGES_URL = os.getenv("OPENAI_IMAGES_URL", "https://api.openai.com/v1/images/generations")
IMAGE_MODEL = os.getenv("IMAGE_MODEL", "dall-e-3")
IMAGE_SIZE = "1024x1024"
IMAGE_REQUEST_TIMEOUT = float(os.getenv("IMAGE_REQUEST_TIMEOUT", "60"))

IMAGE_DIR = os.getenv(
    "IMAGE_DIR",
    os.path.join(os.path.dirname(__file__), "..", "..", "public", "images"),
)
IMAGE_URL_PREFIX = "/images"


class ImageGenerator:
    """Client for the OpenAI image generation endpoint."""

    def __init__(
        self,
        api_key: str = OPENAI_API_KEY,
        url: str = OPENAI_IMAGES_URL,
        model: str = IMAGE_MODEL,
        timeout: float = IMAGE_REQUEST_TIMEOUT,
    ):
        self.api_key = api_key
        self.url = url
        self.model = model
        self.timeout = timeout

    def generate(self, prompt: str) -> str:
        """
        Request a single square image for a prompt.

        Returns: URL of the generated image
        Raises: RuntimeError when no API key is configured,
                requests.RequestException on transport or HTTP errors
        """
        if not self.api_key:
            raise RuntimeError("OPENAI_API_KEY must be set to generate images")

        response = requests.post(
            self.url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "model": self.model,
                "prompt": prompt,
                "n": 1,
                "size": IMAGE_SIZE,
                "response_format": "url",
            },
            timeout=self.timeout,
        )
        response.raise_for_status()

        data = response.json().get("data") or []
        if not data or not data[0].get("url"):
            raise ValueError("Image generation response did not contain an image URL")
        return data[0]["url"]

    def download(self, url: str) -> bytes:
        response = requests.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.content


class ImageStore:
    """Writes day images to disk and maps them to their public URL."""

    def __init__(self, directory: str = IMAGE_DIR, url_prefix: str = IMAGE_URL_PREFIX):
        self.directory = directory
        self.url_prefix = url_prefix

    @staticmethod
    def filename_for(day_date: date) -> str:
        return f"image_{day_date.strftime('%d-%m-%Y')}.png"

    def path_for(self, day_date: date) -> str:
        return os.path.join(self.directory, self.filename_for(day_date))

    def save(self, day_date: date, content: bytes) -> str:
        """Write the image for a date, overwriting any previous file, and return its URL."""
        os.makedirs(self.directory, exist_ok=True)
        path = self.path_for(day_date)
        with open(path, "wb") as f:
            f.write(content)

        logger.info(f"Saved image for {day_date.isoformat()}: {path}")
        return f"{self.url_prefix}/{self.filename_for(day_date)}"


def get_image_generator() -> ImageGenerator:
    return ImageGenerator()


def get_image_store() -> ImageStore:
    return ImageStore()
