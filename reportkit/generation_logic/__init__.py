"""Generation logic package.

Helpers that sit between the HTTP layer and the report engine. Keeping them
here allows `reportkit/api/routes.py` to stay minimal and focused on HTTP
routing.
"""

from .stream_orchestrator import _create_stream_event  # noqa: F401
from .stream_orchestrator import _stream_report_generation_logic  # noqa: F401
