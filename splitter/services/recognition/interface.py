"""
Abstract Receipt Recognizer Interface

DESIGN DECISION: Recognition is an injected capability.
The room never knows which service turned the photo into line items,
how long it took, or whether it was retried. It only receives the
finished batch.

This allows us to:
1. Run the app offline with a placeholder recognizer
2. Swap in a hosted receipt API without touching the core
3. Use fakes in tests
"""

from abc import ABC, abstractmethod

from splitter.models.room import ExtractedItem


class RecognitionError(Exception):
    """Base exception for recognition errors."""
    pass


class RecognitionFailedError(RecognitionError):
    """The service could not read line items from the image."""
    pass


class UnsupportedUploadError(RecognitionError):
    """The upload is not an image we accept."""

    def __init__(self, filename: str, message: str):
        self.filename = filename
        super().__init__(message)


class ReceiptRecognizer(ABC):
    """
    Turns a receipt image into line items.

    Implementations deliver the whole batch at once. An empty list is a
    valid answer (nothing legible) and must not be treated as an error.
    """

    #: Short name used in logs and audit events
    name: str = "recognizer"

    @abstractmethod
    async def recognize(
        self,
        image_bytes: bytes,
        filename: str,
    ) -> list[ExtractedItem]:
        """
        Extract line items from an image.

        Args:
            image_bytes: Raw image content
            filename: Original filename, used by services that sniff formats

        Returns:
            Extracted items in receipt order

        Raises:
            RecognitionFailedError: If the service could not process the image
        """
        pass
