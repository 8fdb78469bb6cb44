"""Compare a stored Discord embed with a freshly transcoded one."""

import logging

from .models import Embed

logger = logging.getLogger("gecko.media.equivalence")


def _presence_differs(stored, fresh) -> bool:
    return (stored is None) != (fresh is None)


def embeds_equivalent(stored: Embed, fresh: Embed) -> bool:
    """Return whether two embeds are the same news or event post.

    Any single differing field makes them different. The one exception is
    the description: Discord returns an empty description as absent, so a
    stored None matches a fresh "".
    """
    if _presence_differs(stored.author, fresh.author):
        logger.debug("Author was added or removed.")
        return False
    if stored.author is not None:
        if stored.author.icon_url != fresh.author.icon_url:
            logger.debug("Author icon URL has changed.")
            return False
        if stored.author.name != fresh.author.name:
            logger.debug("Author name has changed.")
            return False
        if stored.author.url != fresh.author.url:
            logger.debug("Author URL has changed.")
            return False

    if stored.title != fresh.title:
        logger.debug("Title has changed.")
        return False

    if stored.url != fresh.url:
        logger.debug("URL has changed.")
        return False

    if stored.description != fresh.description:
        if not (stored.description is None and fresh.description == ""):
            logger.debug("Description has changed.")
            return False

    if _presence_differs(stored.footer, fresh.footer):
        logger.debug("Footer was added or removed.")
        return False
    if stored.footer is not None and stored.footer.text != fresh.footer.text:
        logger.debug("Footer text has changed.")
        return False

    if _presence_differs(stored.image, fresh.image):
        logger.debug("Image was added or removed.")
        return False
    if stored.image is not None and stored.image.url != fresh.image.url:
        logger.debug("Image URL has changed.")
        return False

    return True
