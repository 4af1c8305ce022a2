"""Website-Biz lead pipeline.

This package discovers local businesses, enriches their contact data,
generates a preview website for each one and sends a rate-limited outreach
email. Every unit of work runs as a job on a durable queue so repeated and
partially failing runs can be retried safely.
"""

__version__ = "0.1.0"
