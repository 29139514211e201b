"""
BrandColor Request ID Utilities
Generate unique ids for tracing resolutions and batch runs.
"""
import uuid
from datetime import datetime


def generate_request_id(prefix: str = "brc") -> str:
    """
    Generate a unique id for tracking a resolution or batch run.

    Args:
        prefix: Short tag identifying the kind of work

    Returns:
        Unique id string, e.g. ``brc-20260101120000-1a2b3c4d``
    """
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    short_uuid = str(uuid.uuid4())[:8]
    return f"{prefix}-{timestamp}-{short_uuid}"
