"""Services package."""

from splitter.services.recognition import (
    MindeeReceiptRecognizer,
    PlaceholderRecognizer,
    ReceiptRecognizer,
    RecognitionError,
    RecognitionFailedError,
    UnsupportedUploadError,
)

__all__ = [
    "MindeeReceiptRecognizer",
    "PlaceholderRecognizer",
    "ReceiptRecognizer",
    "RecognitionError",
    "RecognitionFailedError",
    "UnsupportedUploadError",
]
