from .client import TextGenerationClient
from .extract import extract_json

__all__ = ["TextGenerationClient", "extract_json"]
