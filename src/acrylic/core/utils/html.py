"""HTML primitives: escaping and element emission"""

import html
from typing import Iterable, Optional


VOID_TAGS = {
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
    'link', 'meta', 'param', 'source', 'track', 'wbr',
}


def text(value: str) -> str:
    """Escape text for use in element content or attribute values."""
    return html.escape(value, quote=True).replace('`', '&#96;')


def attrs(pairs: Optional[Iterable[tuple[str, str]]]) -> str:
    return ''.join(f' {text(k)}="{text(v)}"' for k, v in (pairs or ()))


def elem(tag: str, inner: str = '', pairs: Optional[Iterable[tuple[str, str]]] = None) -> str:
    """Return `<tag attrs>inner</tag>`; void tags are self-closed and ignore `inner`."""
    if tag in VOID_TAGS:
        return f"<{tag}{attrs(pairs)}/>"
    return f"<{tag}{attrs(pairs)}>{inner}</{tag}>"
