"""
Text Processor Module.

Decodes raw text documents:
    - .txt: decoded as-is
    - .eml: MIME message parsed with the standard library `email`
      package; plain-text parts preferred, HTML parts stripped of tags
    - .msg: Outlook binary messages decoded leniently; printable runs kept

Author: ML Engineering Team
"""

import html
import re
from email import policy
from email.parser import BytesParser

from invoice_capture.utils.logger import get_logger
from invoice_capture.utils.helpers import decode_text, get_file_extension
from .document import AcquiredText, AcquisitionMethod, SourceDocument

# Initialize module logger
logger = get_logger(__name__)

HTML_BREAK = re.compile(r'<\s*(?:br|/p|/div|/tr|/li|/h\d)\b[^>]*>', re.IGNORECASE)
HTML_CELL = re.compile(r'<\s*/t[dh]\s*>', re.IGNORECASE)
HTML_TAG = re.compile(r'<[^>]+>')
HTML_SCRIPT = re.compile(r'<(script|style)\b.*?</\1\s*>', re.IGNORECASE | re.DOTALL)


def html_to_text(markup: str) -> str:
    """Strip HTML to text, keeping rows and breaks as line breaks."""
    markup = HTML_SCRIPT.sub('', markup)
    markup = HTML_BREAK.sub('\n', markup)
    markup = HTML_CELL.sub(' ', markup)
    text = html.unescape(HTML_TAG.sub('', markup))
    lines = (' '.join(line.split()) for line in text.splitlines())
    return '\n'.join(line for line in lines if line)


def email_to_text(raw_bytes: bytes) -> str:
    """
    Extract readable text from an RFC 822 message.

    The subject becomes a leading "Subject:" line. text/plain parts are
    used when present; otherwise text/html parts are converted.
    """
    message = BytesParser(policy=policy.default).parsebytes(raw_bytes)

    plain_parts, html_parts = [], []
    for part in message.walk():
        if part.is_multipart() or part.get_content_disposition() == 'attachment':
            continue
        content_type = part.get_content_type()
        if content_type not in ('text/plain', 'text/html'):
            continue
        try:
            content = part.get_content()
        except (LookupError, UnicodeDecodeError) as e:
            logger.debug(f"Skipping undecodable {content_type} part: {e}")
            continue
        if content_type == 'text/plain':
            plain_parts.append(content)
        else:
            html_parts.append(html_to_text(content))

    body = '\n\n'.join(plain_parts) if plain_parts else '\n\n'.join(html_parts)

    subject = message.get('subject')
    if subject:
        body = f"Subject: {subject}\n{body}"
    return body.strip()


def outlook_msg_to_text(raw_bytes: bytes) -> str:
    """
    Recover printable text from an Outlook .msg container.

    Message bodies are stored as UTF-16LE streams, so both that and a
    single-byte decoding are scanned for printable runs.
    """
    runs = []
    for decoded in (
        raw_bytes.decode('utf-16-le', errors='ignore'),
        raw_bytes.decode('latin-1'),
    ):
        runs.extend(re.findall(r'[\x20-\x7e\t\r\n]{8,}', decoded))

    lines = []
    for run in runs:
        for line in run.splitlines():
            line = ' '.join(line.split())
            if line and line not in lines:
                lines.append(line)
    return '\n'.join(lines)


class TextProcessor:
    """Processor for text, email and Outlook message documents."""

    def process(self, document: SourceDocument) -> AcquiredText:
        """
        Acquire the text of a text-channel document.

        Args:
            document: Source document on the text channel.

        Returns:
            AcquiredText with acquisition method "raw".
        """
        extension = get_file_extension(document.filename)
        logger.info(f"Processing text document: {document.filename}")

        if extension == 'eml' or (document.media_type or '').startswith('message/'):
            content = email_to_text(document.raw_bytes)
        elif extension == 'msg':
            content = outlook_msg_to_text(document.raw_bytes)
        else:
            content = decode_text(document.raw_bytes)

        document.page_count = 1
        return AcquiredText(content=content, acquisition_method=AcquisitionMethod.RAW)
