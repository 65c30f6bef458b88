"""
TalkAI Gateway

OpenAI-compatible chat completion API in front of the TalkAI chat backend.
"""

__version__ = "0.1.0"
