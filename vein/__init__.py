"""RubyGems mirror toolkit: gem naming, compact index filtering, connection retry, gem metadata and SBOMs."""

__version__ = "0.3.0"