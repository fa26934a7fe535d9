"""Markdown <-> HTML conversion for note content.

``markdown_to_html`` is a full CommonMark renderer (markdown-it-py). The
reverse direction, ``html_to_markdown``, only understands the handful of tags
the rich-text editor emits; anything else is left in the output as literal
HTML. It is a convenience for exporting, not a general converter, and nested
or malformed markup may come out wrong.
"""
from __future__ import annotations
import re

from markdown_it import MarkdownIt

_md = MarkdownIt("js-default", {"html": True, "breaks": True, "linkify": True})


def markdown_to_html(text: str) -> str:
    return _md.render(text or "")


_FENCED = re.compile(r'<pre><code(?: class="language-([^"]*)")?>(.*?)</code></pre>', re.S)
_INLINE_CODE = re.compile(r"<code>(.*?)</code>", re.S)
_HEADINGS = [(re.compile(rf"<h{n}>(.*?)</h{n}>", re.S), "#" * n) for n in (1, 2, 3)]
_LI_PARAGRAPH = re.compile(r"<li><p>(.*?)</p></li>", re.S)
_PARAGRAPH = re.compile(r"<p>(.*?)</p>", re.S)
_STRONG = re.compile(r"<(strong|b)>(.*?)</\1>", re.S)
_EM = re.compile(r"<(em|i)>(.*?)</\1>", re.S)
_UL = re.compile(r"<ul>(.*?)</ul>", re.S)
_OL = re.compile(r"<ol>(.*?)</ol>", re.S)
_LI = re.compile(r"<li>(.*?)</li>", re.S)
_BLOCKQUOTE = re.compile(r"<blockquote>(.*?)</blockquote>", re.S)
_LINK = re.compile(r'<a\b[^>]*?\shref="([^"]*)"[^>]*>(.*?)</a>', re.S)
_IMAGE = re.compile(r"<img\b([^>]*?)/?>")
_SRC = re.compile(r'(?:^|\s)src="([^"]*)"')
_ALT = re.compile(r'(?:^|\s)alt="([^"]*)"')
_BLANK_RUNS = re.compile(r"\n{3,}")


def _fenced(m: re.Match) -> str:
    lang = m.group(1) or ""
    body = m.group(2).strip("\n")
    return f"\n```{lang}\n{body}\n```\n\n"


def _ordered(m: re.Match) -> str:
    items = _LI.findall(m.group(1))
    return "".join(f"{i}. {item.strip()}\n" for i, item in enumerate(items, 1)) + "\n"


def _unordered(m: re.Match) -> str:
    return "".join(f"- {item.strip()}\n" for item in _LI.findall(m.group(1))) + "\n"


def _quote(m: re.Match) -> str:
    body = m.group(1).strip()
    return "\n".join(f"> {line}" if line else ">" for line in body.splitlines()) + "\n\n"


def _image(m: re.Match) -> str:
    src = _SRC.search(m.group(1))
    if not src:
        return m.group(0)
    alt = _ALT.search(m.group(1))
    return f"![{alt.group(1) if alt else ''}]({src.group(1)})"


def html_to_markdown(html: str) -> str:
    md = html or ""
    md = _FENCED.sub(_fenced, md)
    md = _INLINE_CODE.sub(r"`\1`", md)

    for pattern, hashes in _HEADINGS:
        md = pattern.sub(rf"{hashes} \1\n\n", md)

    md = _LI_PARAGRAPH.sub(r"<li>\1</li>", md)
    md = _PARAGRAPH.sub(r"\1\n\n", md)

    md = _STRONG.sub(r"**\2**", md)
    md = _EM.sub(r"*\2*", md)

    md = _UL.sub(_unordered, md)
    md = _OL.sub(_ordered, md)
    md = _BLOCKQUOTE.sub(_quote, md)

    md = _IMAGE.sub(_image, md)
    md = _LINK.sub(r"[\2](\1)", md)

    md = _BLANK_RUNS.sub("\n\n", md)
    return md.strip()
