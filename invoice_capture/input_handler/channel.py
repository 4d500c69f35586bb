"""
Channel Classifier.

Maps a filename and declared media type onto the acquisition channel
that knows how to turn the file into text. The explicit extension wins;
the media type is only consulted when the extension is unknown.
"""

from enum import Enum
from typing import Dict, List, Optional

from config import get_config
from invoice_capture.utils.helpers import get_file_extension
from invoice_capture.utils.exceptions import UnsupportedChannelError


class Channel(str, Enum):
    """Acquisition channel of a source document."""

    PDF = "pdf"
    SPREADSHEET = "spreadsheet"
    TEXT = "text"
    IMAGE = "image"


DEFAULT_EXTENSIONS: Dict[Channel, List[str]] = {
    Channel.PDF: ["pdf"],
    Channel.SPREADSHEET: ["xlsx", "xls", "csv"],
    Channel.TEXT: ["eml", "msg", "txt"],
    Channel.IMAGE: ["png", "jpg", "jpeg"],
}

# Media-type substrings, checked in order
MEDIA_TYPE_HINTS = [
    ("application/pdf", Channel.PDF),
    ("spreadsheet", Channel.SPREADSHEET),
    ("excel", Channel.SPREADSHEET),
    ("text/csv", Channel.SPREADSHEET),
    ("image/", Channel.IMAGE),
    ("text/", Channel.TEXT),
    ("message/rfc822", Channel.TEXT),
]


def channel_extensions() -> Dict[Channel, List[str]]:
    """Extension lists per channel, from `input.channels` in settings.yaml."""
    return {
        channel: [ext.lower().lstrip('.') for ext in
                  get_config(f"input.channels.{channel.value}", defaults)]
        for channel, defaults in DEFAULT_EXTENSIONS.items()
    }


def supported_extensions() -> List[str]:
    """Flat list of every accepted extension."""
    return [ext for exts in channel_extensions().values() for ext in exts]


def classify_channel(filename: str, media_type: Optional[str] = None) -> Channel:
    """
    Classify a document into an acquisition channel.

    Args:
        filename: Original filename (only its extension is used).
        media_type: Declared MIME type, if any.

    Returns:
        The matching Channel.

    Raises:
        UnsupportedChannelError: If neither source yields a match.

    Example:
        >>> classify_channel("remit.XLSX")
        <Channel.SPREADSHEET: 'spreadsheet'>
        >>> classify_channel("upload", "application/pdf")
        <Channel.PDF: 'pdf'>
    """
    extension = get_file_extension(filename or "")

    if extension:
        for channel, extensions in channel_extensions().items():
            if extension in extensions:
                return channel

    if media_type:
        lowered = media_type.lower()
        for hint, channel in MEDIA_TYPE_HINTS:
            if hint in lowered:
                return channel

    raise UnsupportedChannelError(filename, media_type, supported_extensions())
