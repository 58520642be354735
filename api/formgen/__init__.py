"""Form Gen: AI quiz form generation with Google Forms export."""

__version__ = "1.0.0"
