"""
HTML conversion utilities for CryptoNews.
"""
import html
import logging
from pathlib import Path
from typing import Optional, Union

import mistune

logger = logging.getLogger(__name__)

DEFAULT_CSS = """
body {
    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
    max-width: 960px;
    margin: 0 auto;
    padding: 20px;
    line-height: 1.6;
    color: #333;
}

h1, h2, h3, h4 {
    color: #1a1a1a;
    margin-top: 1.4em;
    margin-bottom: 0.4em;
}

a {
    color: #0066cc;
    text-decoration: none;
}

a:hover {
    text-decoration: underline;
}

table {
    border-collapse: collapse;
    margin: 1em 0;
}

th, td {
    border: 1px solid #e2e8f0;
    padding: 6px 12px;
    text-align: left;
}
"""


class HtmlConverter:
    """
    Converts Markdown digests to standalone HTML pages.
    """
    def __init__(self, css_file: Optional[str] = None):
        """
        Initialize the HtmlConverter.

        Args:
            css_file: Optional CSS file to inline instead of the default styles
        """
        self.css_file = css_file
        self.css_content = self._load_css()
        # Raw HTML in feed text is escaped, never rendered
        self._markdown = mistune.create_markdown(escape=True, plugins=['table'])

    def _load_css(self) -> str:
        if not self.css_file:
            return DEFAULT_CSS
        try:
            with open(self.css_file, 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            logger.warning(f"CSS file {self.css_file} not found. Using default styles.")
            return DEFAULT_CSS

    def convert(self, markdown_text: str, title: str = "Crypto Daily") -> str:
        """
        Render Markdown into a complete HTML document.
        """
        body = self._markdown(markdown_text)
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
    <style>{self.css_content}</style>
</head>
<body>
{body}
</body>
</html>
"""

    def convert_file(self, markdown_path: Union[str, Path], html_path: Union[str, Path],
                     title: str = "Crypto Daily") -> Path:
        """
        Convert a Markdown file and write the HTML next to it.

        Returns:
            Path of the written HTML file
        """
        markdown_path = Path(markdown_path)
        html_path = Path(html_path)

        html_path.write_text(
            self.convert(markdown_path.read_text(encoding='utf-8'), title),
            encoding='utf-8'
        )
        logger.info(f"Converted {markdown_path} to {html_path}")
        return html_path
