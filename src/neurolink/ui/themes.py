"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register it in the app.
"""

from textual.theme import Theme

# Soft, low-contrast palette; nothing on screen should feel alarming
# except the escalation treatment, which uses the error color.
CALM_DUSK = Theme(
    name="calm-dusk",
    primary="#8fb8de",      # Soft blue - user messages, focus
    secondary="#b8a9e0",    # Lavender - assistant accents
    accent="#9fd8cb",       # Mint - resource replies
    foreground="#e3e6ee",
    background="#14161f",
    success="#a8d8a8",
    warning="#f2c38b",
    error="#ef8f9d",        # Escalation and error replies
    surface="#1c1f2b",
    panel="#181a24",
    dark=True,
    variables={
        "input-cursor-background": "#e3e6ee",
        "input-cursor-foreground": "#14161f",
        "input-selection-background": "#8fb8de 30%",
        "border": "#3a3f52",
        "border-blurred": "#2a2e3d",
        "scrollbar": "#2a2e3d",
        "scrollbar-hover": "#3a3f52",
        "scrollbar-active": "#8fb8de",
        "scrollbar-background": "#181a24",
        "footer-foreground": "#c4c8d4",
        "footer-background": "#14161f",
        "footer-key-foreground": "#9fd8cb",
        "footer-key-background": "#2a2e3d",
    },
)
