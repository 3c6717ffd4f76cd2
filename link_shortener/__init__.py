"""Link shortener core: links, tags, repository contract and cleanup sweeps."""

__version__ = "0.1.0"
