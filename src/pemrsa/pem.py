"""PEM text handling: splitting a PEM block into label and DER payload, and repairing damaged PEM text.

Keys frequently arrive mangled after a trip through a form field or a credential store: line breaks replaced by
spaces, delimiters cut off, Windows line endings. `repair_pem` is a pure string transform addressing those defects
and knows nothing about the cryptographic content of the block.

Typical usage example:

    label, der = read_pem(text)
    label, der = read_pem(repair_pem(text))
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
import re

from pemrsa.errors import KeyParseError
from pemrsa.errors import UnsupportedKeyTypeError

PEM_LINE_WIDTH = 64
REPAIR_LABEL = "RSA KEY"

_BEGIN = re.compile(r"-----BEGIN ([A-Z0-9 ]+?)-----")
_END = re.compile(r"-----END ([A-Z0-9 ]+?)-----")
_HEADER = re.compile(r"^([A-Za-z0-9-]+):\s*(.*)$")


def _header_line(label: str) -> str:
    return f"-----BEGIN {label}-----"


def _footer_line(label: str) -> str:
    return f"-----END {label}-----"


def read_pem(text: str) -> tuple[str, bytes]:
    """Reads a single PEM block from text.

    The block must open on its first non-blank line, and close with a footer carrying the same label. Content after
    the footer is ignored.

    Args:
        text: The PEM encoded text.

    Returns:
        The PEM label (e.g. "RSA PRIVATE KEY") and the decoded DER payload.

    Raises:
        KeyParseError: If the text has invalid PEM structure or a non-Base64 body.
        UnsupportedKeyTypeError: If the block is a legacy encrypted PEM.
    """
    lines = text.strip().splitlines()
    if not lines:
        raise KeyParseError("PEM text is empty")
    headline = lines[0].strip()
    match = _BEGIN.fullmatch(headline)
    if match is None:
        raise KeyParseError(f"PEM Headline {headline[:40]!r} is not a BEGIN line")
    label = match.group(1)
    footer = _footer_line(label)
    headers = {}
    parcel = []
    for line in lines[1:]:
        line = line.strip()
        if line == footer:
            break
        hdr = _HEADER.match(line)
        if hdr and not parcel:
            headers[hdr.group(1)] = hdr.group(2)
        elif line:
            parcel.append(line)
    else:
        raise KeyParseError(f"PEM text does not contain footer: {footer}")
    if "ENCRYPTED" in headers.get("Proc-Type", ""):
        raise UnsupportedKeyTypeError("Encrypted PEM keys are not supported.")
    if not parcel:
        raise KeyParseError("PEM body is empty")
    try:
        der = base64.b64decode("".join(parcel), validate=True)
    except ValueError as exc:
        raise KeyParseError("PEM body is not valid Base64") from exc
    return label, der


def wrap_pem(label: str, body: str, headers: list[str] | None = None) -> str:
    """Assembles a PEM block from a label and a Base64 body.

    Args:
        label: The PEM label.
        body: The Base64 body, without whitespace.
        headers: Optional RFC 1421 header lines placed before the body.

    Returns:
        The PEM text, body wrapped at PEM_LINE_WIDTH and terminated by a newline.
    """
    out = [_header_line(label)]
    if headers:
        out.extend(headers)
        out.append("")
    out.extend(body[i:i + PEM_LINE_WIDTH] for i in range(0, len(body), PEM_LINE_WIDTH))
    out.append(_footer_line(label))
    return "\n".join(out) + "\n"


def repair_pem(text: str) -> str:
    """Best-effort repair of damaged PEM text.

    Normalises line endings, reinserts missing BEGIN/END delimiters, strips stray whitespace from the body and
    re-wraps it. Delimiters are also found when the whole block was flattened onto a single line. Never raises;
    whatever comes out still has to survive `read_pem`.

    Args:
        text: The possibly damaged PEM text.

    Returns:
        The repaired PEM text.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n").strip()
    begin = _BEGIN.search(text)
    end = _END.search(text, begin.end() if begin else 0)
    if begin:
        label = begin.group(1)
    elif end:
        label = end.group(1)
    else:
        label = REPAIR_LABEL
    body = text[begin.end() if begin else 0:end.start() if end else len(text)]
    headers = []
    rest = []
    for line in body.split("\n"):
        hdr = _HEADER.match(line.strip())
        if hdr and not rest:
            headers.append(f"{hdr.group(1)}: {hdr.group(2)}")
        elif line.strip():
            rest.append(line)
    return wrap_pem(label, "".join("".join(rest).split()), headers)
