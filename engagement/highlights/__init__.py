"""Text highlights and post ratings."""

from engagement.highlights.models import ContentFeedback, Highlight


__all__ = ["ContentFeedback", "Highlight"]
