from __future__ import annotations

_HTML_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
        "`": "&#x60;",
        "=": "&#x3D;",
    }
)


class HtmlEscaper:
    def escape(self, value: str) -> str:
        return value.translate(_HTML_ESCAPES)


class PassthroughEscaper:
    def escape(self, value: str) -> str:
        return value
