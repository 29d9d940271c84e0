"""
Custom exception hierarchy for the Immigration AMA Assistant.

This module defines a standardized exception hierarchy for consistent
error handling across the API and the offline scripts.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class BaseAppException(HTTPException):
    """Base exception for all application errors."""

    def __init__(
        self,
        detail: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code or self.__class__.__name__


# Request Exceptions


class MessageRequiredError(BaseAppException):
    """Raised when a chat request carries no message."""

    def __init__(self):
        super().__init__(
            "Message is required",
            status.HTTP_400_BAD_REQUEST,
            error_code="MESSAGE_REQUIRED",
        )


# Resource Exceptions


class ResourceNotFoundError(BaseAppException):
    """Raised when a resource is not found."""

    def __init__(self, resource_type: str, resource_id: str):
        detail = f"{resource_type} with ID '{resource_id}' not found"
        super().__init__(
            detail, status.HTTP_404_NOT_FOUND, error_code="RESOURCE_NOT_FOUND"
        )


class TrainingFileNotFoundError(BaseAppException):
    """Raised when the fine-tuning data file is missing or empty."""

    def __init__(self, file_path: str):
        super().__init__(
            f"Training file not found or empty at '{file_path}'. "
            "Run the scrape_amas script first to generate the training data.",
            status.HTTP_404_NOT_FOUND,
            error_code="TRAINING_FILE_NOT_FOUND",
        )


# Service Exceptions


class ExternalAPIError(BaseAppException):
    """Raised when external API calls fail."""

    def __init__(self, service: str, detail: str):
        # Map to controlled vocabulary to prevent high cardinality
        service_map = {
            "openai": "OPENAI",
            "hackernews": "HACKERNEWS",
            "external": "EXTERNAL",
        }
        normalized_service = service_map.get(service.lower(), "EXTERNAL")
        super().__init__(
            f"{service} API error: {detail}",
            status.HTTP_502_BAD_GATEWAY,
            error_code=f"{normalized_service}_API_ERROR",
        )
