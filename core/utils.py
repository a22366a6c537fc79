import logging

logger = logging.getLogger(__name__)


def ask_user(prompt: str) -> str:
    """
    Asks the user for input and returns the trimmed response.
    """
    print(prompt, end="")
    return input().strip()


def xpath_literal(text: str) -> str:
    """
    Quotes ``text`` for use inside an XPath expression.

    XPath 1.0 has no escape sequences, so text holding both quote kinds is
    assembled with concat().
    """
    if '"' not in text:
        return f'"{text}"'
    if "'" not in text:
        return f"'{text}'"
    parts = text.split('"')
    return "concat(" + ", '\"', ".join(f'"{part}"' for part in parts) + ")"
