"""dreamwizard - guided dream-journal flows with deterministic biorhythm scoring."""

__version__ = '0.1.0'
