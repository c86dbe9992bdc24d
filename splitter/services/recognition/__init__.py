"""Receipt recognition services package."""

from splitter.services.recognition.interface import (
    ReceiptRecognizer,
    RecognitionError,
    RecognitionFailedError,
    UnsupportedUploadError,
)
from splitter.services.recognition.mindee_service import MindeeReceiptRecognizer
from splitter.services.recognition.mock_service import SAMPLE_RECEIPT, PlaceholderRecognizer

__all__ = [
    "MindeeReceiptRecognizer",
    "PlaceholderRecognizer",
    "ReceiptRecognizer",
    "RecognitionError",
    "RecognitionFailedError",
    "SAMPLE_RECEIPT",
    "UnsupportedUploadError",
]
