# cloudhost/core/prompts.py
import typer

# Interaction controls (set in cloudhost.app)
ASSUME_YES = False
INTERACTIVE = True

def set_interaction(assume_yes: bool = False, interactive: bool = True):
    global ASSUME_YES, INTERACTIVE
    ASSUME_YES = assume_yes
    INTERACTIVE = interactive

def is_interactive() -> bool:
    return INTERACTIVE and not ASSUME_YES

def confirm(message: str, default: bool = True) -> bool:
    """
    Ask a yes/no question.
    --yes answers every question with yes; --no-interaction takes the default.
    """
    if ASSUME_YES:
        return True
    if not INTERACTIVE:
        return default
    return typer.confirm(message, default=default, err=True)
