"""Line-based markdown to HTML rendering for answer text.

Only the subset the models actually produce is handled: ``#``/``##``/``###``
headings, ``-``/``*``/``+``/``N.`` list items, paragraphs, and inline
``**bold**`` / ``*italic*``. Input is HTML-escaped first, so the output only
ever contains the tags emitted here.
"""

import html
import re

_heading_re = re.compile(r"^(#{1,3})\s+(.*)$")
_bullet_re = re.compile(r"^\s*[-*+]\s+")
_numbered_re = re.compile(r"^\s*\d+\.\s+")
_bold_re = re.compile(r"\*\*([^*]+)\*\*")
_italic_re = re.compile(r"(?<!\*)\*([^*\n]+)\*(?!\*)")

UL_OPEN = '<ul class="list-disc space-y-1 my-2 ml-4">'
UL_CLOSE = "</ul>"

HEADING_TAGS = {
    1: '<h1 class="text-2xl font-bold mt-6 mb-4 text-foreground">{}</h1>',
    2: '<h2 class="text-xl font-bold mt-5 mb-3 text-foreground">{}</h2>',
    3: '<h3 class="text-lg font-bold mt-4 mb-2 text-foreground">{}</h3>',
}
PARAGRAPH_TAG = '<p class="mb-3 leading-relaxed text-foreground">{}</p>'
LIST_ITEM_TAG = '<li class="mb-1 text-foreground">{}</li>'


def render_inline(text: str) -> str:
    text = _bold_re.sub(r'<strong class="font-semibold">\1</strong>', text)
    return _italic_re.sub(r"<em>\1</em>", text)


def list_marker(line: str) -> re.Match | None:
    return _bullet_re.match(line) or _numbered_re.match(line)


class MarkdownRenderer:
    def __init__(self) -> None:
        self.in_list = False
        self.paragraph: list[str] = []
        self.out: list[str] = []

    def _flush_paragraph(self) -> None:
        if not self.paragraph:
            return
        text = " ".join(self.paragraph).strip()
        self.paragraph = []
        if text:
            self.out.append(PARAGRAPH_TAG.format(render_inline(text)))

    def _close_list(self) -> None:
        if self.in_list:
            self.out.append(UL_CLOSE)
            self.in_list = False

    def feed_line(self, raw: str) -> None:
        line = html.escape(raw.strip(), quote=False)

        if not line:
            self._flush_paragraph()
            self._close_list()
            return

        heading = _heading_re.match(line)
        if heading:
            self._flush_paragraph()
            self._close_list()
            level = len(heading.group(1))
            self.out.append(HEADING_TAGS[level].format(render_inline(heading.group(2).strip())))
            return

        marker = list_marker(line)
        if marker:
            self._flush_paragraph()
            if not self.in_list:
                self.out.append(UL_OPEN)
                self.in_list = True
            # only the matched marker; "- 2020. Outbreak" keeps its year
            content = line[marker.end():].strip()
            self.out.append(LIST_ITEM_TAG.format(render_inline(content)))
            return

        # plain text ends a list so a later <p> never lands inside <ul>
        self._close_list()
        self.paragraph.append(line)

    def finish(self) -> str:
        self._flush_paragraph()
        self._close_list()
        return "\n".join(self.out)

    def render(self, text: str) -> str:
        for raw in (text or "").split("\n"):
            self.feed_line(raw)
        return self.finish()


def render_markdown(text: str) -> str:
    return MarkdownRenderer().render(text)
