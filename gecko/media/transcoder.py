"""Website markdown to Discord embed converter.

Discord embeds support a limited markdown subset:
  **bold**, *italic*, __underline__, ~~strikethrough~~,
  `inline code`, ```code blocks```, [link](url)

The website editor produces more than that. Handling per construct:
  - Emphasis, links, code:  supported, left as is
  - Headers:                not supported, converted to bold/underline
  - Images:                 not supported, first one becomes the embed image
  - Lists, quotes, tables:  not supported, left as is
  - ==Highlight==:          not supported, converted to bold
  - {{icon}}:               not supported, removed
  - {iframe}(url):          YouTube becomes a link, anything else is removed

The order of the rules matters: later rules assume earlier ones ran.
Nothing here raises on malformed markup; every rule degrades to
dropping or leaving the input as is.
"""

import copy
import re
from typing import Optional

from .models import Embed, EmbedImage

BASE_URL = "https://geco.ethz.ch"

# Discord's limit for an embed description
DESCRIPTION_LIMIT = 4096


# ============================================================
# PATTERNS
# ============================================================

_HEADER_RE = re.compile(r'(#+)\s*([^\r\n]+)(?:\r\n|\r|\n|$)')
_IMAGE_RE = re.compile(r'!\[[^\]]*\]\(([^)]*)\)')
_NESTED_IMAGE_RE = re.compile(r'\[!\[([^\]]*)\]\([^)]*\)\]\(([^)]*)\)')
_EMPTY_LINK_RE = re.compile(r'\[[^\]]*\]\(\s*\)')
_EMPTY_LINK_NAME_RE = re.compile(r'\[\s*\]\(([^)]*)\)')
_ICON_RE = re.compile(r'\{\{[^}]+\}\}')
_IFRAME_RE = re.compile(r'\{iframe\}\(([^)]*)\)')
_YOUTUBE_RE = re.compile(r'https?://(?:www\.)?youtu(?:be\.com/watch\?v=|\.be/)([\w\-]{1,11})')


# ============================================================
# HEADERS
# ============================================================
#   #      -> **__H1__**
#   ##     -> __H2__
#   ###+   -> __H3__ ...

def convert_headers(text: str) -> str:
    """Replace markdown headings with bold/underlined text plus a line break.

    Every replacement removes at least one '#', so the loop terminates.
    """
    match = _HEADER_RE.search(text)
    while match:
        depth = len(match.group(1))
        heading = match.group(2)
        if depth == 1:
            replacement = f"**__{heading}__**\n"
        else:
            replacement = f"__{heading}__\n"
        text = text[:match.start()] + replacement + text[match.end():]
        match = _HEADER_RE.search(text)
    return text


# ============================================================
# IMAGES
# ============================================================

def extract_image(text: str) -> tuple[str, Optional[str]]:
    """Pull images out of the text.

    Returns:
        Tuple of (text_without_images, url_of_first_image_or_None)
    """
    image_url = None
    match = _IMAGE_RE.search(text)
    if match:
        image_url = match.group(1)

    # [![alt](img)](link) -> [alt](link)
    text = _NESTED_IMAGE_RE.sub(lambda m: f"[{m.group(1)}]({m.group(2)})", text)
    text = _IMAGE_RE.sub("", text)

    # Links that lost their target or their label along the way
    text = _EMPTY_LINK_RE.sub("", text)
    text = _EMPTY_LINK_NAME_RE.sub(lambda m: m.group(1), text)
    return text, image_url


# ============================================================
# HIGHLIGHTING
# ============================================================
# A regex can't tell a closing "==" from any other "=" in between,
# so this is a single scan with two states: outside a span, or
# inside one waiting for the closing pair.

def highlight_to_bold(text: str) -> str:
    """Convert ==highlighted== spans to **bold**.

    Spans don't nest. An opening pair without a closing one is left as is.
    A delimiter pair is consumed once, so "===" can't open and close.
    """
    parts = []
    flushed = 0
    open_at = None
    prev = ""

    for i, char in enumerate(text):
        if char == "=" and prev == "=":
            if open_at is None:
                open_at = i - 1
            else:
                parts.append(text[flushed:open_at])
                parts.append("**" + text[open_at + 2:i - 1] + "**")
                flushed = i + 1
                open_at = None
            prev = ""
            continue
        prev = char

    parts.append(text[flushed:])
    return "".join(parts)


# ============================================================
# ICONS / IFRAMES
# ============================================================

def strip_icons(text: str) -> str:
    """Remove {{icon}} tokens. There is no Discord equivalent yet."""
    return _ICON_RE.sub("", text)


def convert_iframes(text: str) -> str:
    """Turn YouTube iframes into a [Video](url) link and drop all others.

    Map frames are dropped as well; there is no link form for them yet.
    """
    match = _IFRAME_RE.search(text)
    while match:
        replacement = ""
        if match.group(1):
            video = _YOUTUBE_RE.search(match.group(0))
            if video:
                replacement = f"[Video]({video.group(0)})"
        text = text[:match.start()] + replacement + text[match.end():]
        match = _IFRAME_RE.search(text)
    return text


# ============================================================
# LENGTH
# ============================================================

def truncate_description(description: str, url: str, max_length: int = DESCRIPTION_LIMIT) -> str:
    """Cut the description to exactly max_length, ending in a read-more link."""
    if len(description) <= max_length:
        return description
    suffix = f"...\n\n[Read more]({url})"
    return (description[:max(0, max_length - len(suffix))] + suffix)[:max_length]


def _strip(value: Optional[str]) -> Optional[str]:
    return value.strip() if value is not None else None


# ============================================================
# COMBINED PIPELINE
# ============================================================

def transcode(embed: Embed, base_url: str = BASE_URL, max_length: int = DESCRIPTION_LIMIT) -> Embed:
    """Convert a raw website embed into one Discord can render.

    The input embed is not modified.

    Pipeline order:
    1. Headers
    2. Images (first one becomes the embed image)
    3. Highlighting
    4. Icons
    5. Iframes
    6. Absolute author icon URL
    7. Trimming
    8. Length limit
    """
    result = copy.deepcopy(embed)
    description = result.description or ""

    description = convert_headers(description)

    description, image_url = extract_image(description)
    if image_url is not None:
        result.image = EmbedImage(url=image_url)

    description = highlight_to_bold(description)
    description = strip_icons(description)
    description = convert_iframes(description)

    # The website stores author icons as site-relative paths
    if result.author is not None and result.author.icon_url is not None:
        result.author.icon_url = base_url + result.author.icon_url

    result.description = description.strip()
    result.title = _strip(result.title)
    result.url = _strip(result.url)

    if result.author is not None:
        result.author.name = _strip(result.author.name)
        result.author.url = _strip(result.author.url)
        result.author.icon_url = _strip(result.author.icon_url)

    if result.footer is not None:
        result.footer.text = _strip(result.footer.text)

    if result.image is not None:
        result.image.url = _strip(result.image.url)

    result.description = truncate_description(result.description, result.url or "", max_length)
    return result
