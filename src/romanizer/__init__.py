"""
SRT Romanizer - Chunked subtitle transliteration into the Roman alphabet.

A small pipeline for:
- Splitting subtitle documents into timing-addressed blocks
- Grouping blocks into size-bounded chunks
- Transliterating each chunk in order with an OpenAI model
- Assembling the output document while reporting progress
"""

__version__ = "0.1.0"
