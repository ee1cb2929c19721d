"""NoteTaker - dictation transcripts with live text normalization."""

__version__ = "0.1.0"
