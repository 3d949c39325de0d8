"""AWS client wrapper module."""

from .aws_client import AWSAPIError, AWSClient, DefaultTagsError

__all__ = ["AWSClient", "AWSAPIError", "DefaultTagsError"]
