import re

# Characters Telegram's MarkdownV2 parser treats as markup
MARKDOWN_V2_RESERVED = "_*[]()~`>#+-=|{}.!"

_RESERVED_PATTERN = re.compile(r"([_*\[\]()~`>#+\-=|{}.!])")


def escape_markdown_v2(text="") -> str:
    """
    Escape user text for a MarkdownV2 message.

    Every reserved character gets exactly one backslash in front of it,
    everything else is left alone.
    """
    if text is None:
        return ""
    return _RESERVED_PATTERN.sub(r"\\\1", str(text))
