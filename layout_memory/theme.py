"""Theme definitions for the layout-memory host app.

Keys match ``display.theme`` in preferences.yaml.
"""

from textual.theme import Theme

TEXTUAL_THEMES: dict[str, Theme] = {
    "dark": Theme(
        name="layout-dark",
        primary="#cc7700",
        secondary="#5599dd",
        accent="#445566",
        background="black",
        surface="#111111",
        panel="#555555",
        success="#5599dd",
        warning="#aaaa00",
        error="#cc3333",
        dark=True,
    ),
    "light": Theme(
        name="layout-light",
        primary="#cc6600",
        secondary="#4488aa",
        accent="#667788",
        background="#fafafa",
        surface="#f0f0f0",
        panel="#cccccc",
        success="#338855",
        warning="#aa8800",
        error="#cc3333",
        dark=False,
    ),
}

DEFAULT_THEME = TEXTUAL_THEMES["dark"]


def theme_for(name: str) -> Theme:
    """Return the theme registered under *name*, or the dark default."""
    return TEXTUAL_THEMES.get(name, DEFAULT_THEME)
