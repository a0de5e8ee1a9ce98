import re

_CODE_FENCE_REGEX = re.compile(r"```[a-zA-Z]*")
_STRING_LITERAL = r'("(?:\\.|[^"\\])*")'
# Each pattern matches a string literal first so comment markers and commas inside strings are kept.
_COMMENT_REGEX = re.compile(_STRING_LITERAL + r"|/\*.*?\*/|//[^\n]*", re.DOTALL)
_TRAILING_COMMA_REGEX = re.compile(_STRING_LITERAL + r"|,(\s*[\]}])")


def _strip_comments(text: str) -> str:
    return _COMMENT_REGEX.sub(lambda match: match.group(1) or "", text)


def _strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA_REGEX.sub(lambda match: match.group(1) or match.group(2), text)


def clean_json_array_text(raw: str) -> str:
    """
    Reduce a model completion to the JSON array it is supposed to contain.

    Completion models tend to wrap the payload in markdown fences, add
    commentary before or after it, or annotate entries with JS-style comments.
    The cleaned text keeps only the outermost ``[...]`` span with comments and
    trailing commas removed outside string literals. When no brackets are
    present the stripped text is returned unchanged so the caller's JSON
    parser reports the failure.
    """
    text = (raw or "").strip()
    if not text:
        return ""
    text = _CODE_FENCE_REGEX.sub("", text)

    start = text.find("[")
    end = text.rfind("]")
    if start != -1 and end > start:
        text = text[start : end + 1]

    text = _strip_comments(text)
    text = _strip_trailing_commas(text)
    return text.strip()


def normalize_term(value: str) -> str:
    return " ".join(value.split()).lower()
