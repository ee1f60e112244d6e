"""Root landing page with links to the API docs and main resources."""

from html import escape

_LINKS = (
    ("/docs", "Interactive API docs"),
    ("/redoc", "Reference docs"),
    ("/api/v1/health", "Health check"),
    ("/api/v1/properties", "Property listings"),
    ("/api/v1/properties/map", "Map listings"),
)


def render_root_page(app_name: str, version: str) -> str:
    """Return HTML for the root landing page."""
    links = "\n".join(
        f'            <li><a href="{href}">{label}</a> <code>{href}</code></li>'
        for href, label in _LINKS
    )
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(app_name)}</title>
    <style>
        body {{ font-family: system-ui, sans-serif; margin: 0; padding: 2rem 1rem; color: #333; }}
        .wrap {{ max-width: 560px; margin: 0 auto; }}
        h1 {{ color: #FF6B35; margin-bottom: 0.25rem; }}
        .version {{ color: #888; font-size: 0.9rem; }}
        li {{ margin: 0.5rem 0; }}
        a {{ color: #FF6B35; }}
        code {{ color: #666; font-size: 0.85rem; }}
    </style>
</head>
<body>
    <div class="wrap">
        <h1>{escape(app_name)}</h1>
        <p class="version">Rental marketplace API v{escape(version)}</p>
        <ul>
{links}
        </ul>
    </div>
</body>
</html>
"""
